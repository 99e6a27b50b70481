"""Generation orchestration.

Turns session and campaign state into generation requests, sends them to the
GenerationService, validates the returned text and records the result.
Nothing is written unless the whole artifact parsed and validated.
"""

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List

from langchain_core.exceptions import OutputParserException
from langchain_core.output_parsers import JsonOutputParser
from pydantic import ValidationError

from agents import VALUE_PROP_SCHEMA, build_value_prop_prompt, build_campaign_prompt
from core.campaign_store import CampaignStateStore
from core.errors import (
    EmptyAssetSelection,
    GenerationInProgress,
    MalformedGenerationResult,
    MissingBrief,
    NotAuthenticated,
    SessionChanged,
)
from core.llm import GenerationService
from core.session import SessionManager
from core.state import Campaign, ValuePropFramework

logger = logging.getLogger(__name__)


def parse_generation_result(text: str) -> Any:
    """
    Parse provider text as JSON.

    Markdown code fences around the JSON are tolerated.

    Raises:
        MalformedGenerationResult: the text is not JSON
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedGenerationResult("empty response", raw_text=text)
    try:
        return JsonOutputParser().parse(text)
    except OutputParserException as e:
        raise MalformedGenerationResult(f"response is not valid JSON ({e})", raw_text=text) from e


def campaign_name_for(moment: datetime) -> str:
    return f"Campaign - {moment.strftime('%m/%d/%Y, %I:%M:%S %p')}"


class GenerationOrchestrator:
    """Runs value proposition and campaign asset generations for one session.

    At most one generation is in flight at a time; a second request fails
    with GenerationInProgress instead of queuing.
    """

    def __init__(self, session: SessionManager, campaigns: CampaignStateStore, service: GenerationService, clock=datetime.now):
        self.session = session
        self.campaigns = campaigns
        self.service = service
        self.clock = clock
        self._in_flight = False

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @contextmanager
    def _single_flight(self):
        if self._in_flight:
            raise GenerationInProgress()
        self._in_flight = True
        try:
            yield
        finally:
            self._in_flight = False

    def _require_session(self, action: str):
        if not self.session.is_authenticated:
            raise NotAuthenticated(action)

    def _ensure_same_session(self, started):
        # every login or logout replaces the Session object
        if self.session.session is not started:
            logger.warning("Session changed during generation, discarding the result")
            raise SessionChanged()

    async def generate_value_prop(self, brief: str) -> ValuePropFramework:
        """
        Generate the value proposition framework for a product brief.

        On success the brief and framework are stored and, for a first-time
        user, the account is marked as onboarded.

        Args:
            brief: Product brief text

        Returns:
            The stored ValuePropFramework
        """
        self._require_session("value proposition generation")
        if not brief or not brief.strip():
            raise MissingBrief()

        with self._single_flight():
            started = self.session.session
            logger.info(f"Generating value proposition for {self.session.session.user_email}")
            try:
                text = await self.service.generate(build_value_prop_prompt(brief), VALUE_PROP_SCHEMA)
                data = parse_generation_result(text)
                try:
                    framework = ValuePropFramework.model_validate(data)
                except ValidationError as e:
                    raise MalformedGenerationResult(f"value proposition has the wrong shape ({e.error_count()} errors)", raw_text=text) from e
            except Exception as e:
                logger.error(f"Value proposition generation failed: {e}")
                raise

            self._ensure_same_session(started)
            self.campaigns.set_onboarding(brief, framework)
            if self.session.is_first_time_user:
                self.session.mark_onboarded()
            logger.info("Value proposition framework generated")
            return framework

    async def generate_campaign_assets(self, brief: str, framework, goal: str, tone: str, asset_selection: List[str]) -> Campaign:
        """
        Generate the selected campaign assets and append them to the history.

        Args:
            brief: Product brief text
            framework: Current ValuePropFramework, or None
            goal: Campaign goal
            tone: Campaign tone
            asset_selection: Asset kinds to generate, e.g. "Website Copy Suite"

        Returns:
            The Campaign appended to the history
        """
        self._require_session("campaign generation")
        if not brief or not brief.strip():
            raise MissingBrief()
        assets = list(dict.fromkeys(a.strip() for a in (asset_selection or []) if a and a.strip()))
        if not assets:
            raise EmptyAssetSelection()

        with self._single_flight():
            started = self.session.session
            logger.info(f"Generating campaign assets: {', '.join(assets)}")
            try:
                text = await self.service.generate(build_campaign_prompt(brief, framework, goal, tone, assets))
                details = parse_generation_result(text)
                if not isinstance(details, dict):
                    raise MalformedGenerationResult("campaign assets must be a JSON object", raw_text=text)
            except Exception as e:
                logger.error(f"Campaign generation failed: {e}")
                raise

            self._ensure_same_session(started)
            campaign = self._new_campaign(assets, details)
            self.campaigns.append_campaign(campaign)
            return campaign

    def _new_campaign(self, assets: List[str], details: Dict[str, Any]) -> Campaign:
        moment = self.clock()
        return Campaign(
            campaign_name=campaign_name_for(moment),
            timestamp=int(moment.timestamp() * 1000),
            assets_generated=assets,
            details=details,
        )
