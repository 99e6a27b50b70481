import logging
from typing import Any, List, Optional, Tuple
from pydantic import ValidationError

from core.state import Campaign, ValuePropFramework
from core.store import PersistentStore, ABSENT, ONBOARDING_KEY, HISTORY_KEY

logger = logging.getLogger(__name__)


class CampaignStateStore:
    """Current product brief, value proposition framework and campaign history.

    Every mutator writes through to the PersistentStore before the in-memory
    state changes, so a failed write leaves both untouched.
    """

    def __init__(self, store: PersistentStore):
        self.store = store
        self._product_brief = ""
        self._framework: Optional[ValuePropFramework] = None
        self._history: List[Campaign] = []
        # stored history as read, unreadable entries included
        self._records: List[Any] = []

    @property
    def product_brief(self) -> str:
        return self._product_brief

    @property
    def value_prop_framework(self) -> Optional[ValuePropFramework]:
        return self._framework

    @property
    def campaign_history(self) -> Tuple[Campaign, ...]:
        return tuple(c.model_copy(deep=True) for c in self._history)

    def get_campaign(self, index: int) -> Campaign:
        return self._history[index].model_copy(deep=True)

    def set_product_brief(self, text: str) -> None:
        self.set_onboarding(text, self._framework)

    def set_value_prop_framework(self, framework: Optional[ValuePropFramework]) -> None:
        self.set_onboarding(self._product_brief, framework)

    def set_onboarding(self, brief: str, framework: Optional[ValuePropFramework]) -> None:
        """Store the brief and framework together in one write."""
        self.store.put(ONBOARDING_KEY, {
            "productBrief": brief,
            "valuePropFramework": framework.to_record() if framework else None,
        })
        self._product_brief = brief
        self._framework = framework

    def append_campaign(self, campaign: Campaign) -> None:
        campaign = campaign.model_copy(deep=True)
        records = self._records + [campaign.to_record()]
        self.store.put(HISTORY_KEY, records)
        self._records = records
        self._history = self._history + [campaign]
        logger.info(f"Appended '{campaign.campaign_name}' to campaign history ({len(self._history)} total)")

    def discard(self) -> None:
        """Drop all account-scoped state, in memory and on disk."""
        self.store.clear(ONBOARDING_KEY)
        self.store.clear(HISTORY_KEY)
        self._product_brief = ""
        self._framework = None
        self._history = []
        self._records = []
        logger.info("Discarded product brief, framework and campaign history")

    def load_from_store(self) -> None:
        """
        Repopulate brief, framework and history from the PersistentStore.

        Unreadable history entries are skipped for display but kept in the
        stored list, so later appends write them back unchanged.
        """
        data = self.store.get(ONBOARDING_KEY)
        if not isinstance(data, dict):
            data = {}
        brief = data.get("productBrief")
        self._product_brief = brief if isinstance(brief, str) else ""

        self._framework = None
        if data.get("valuePropFramework") is not None:
            try:
                self._framework = ValuePropFramework.model_validate(data["valuePropFramework"])
            except ValidationError as e:
                logger.warning(f"Stored value proposition framework is invalid, ignoring it: {e}")

        records = self.store.get(HISTORY_KEY)
        if records is ABSENT or not isinstance(records, list):
            records = []
        self._records = list(records)
        self._history = []
        for i, record in enumerate(records):
            try:
                self._history.append(Campaign.model_validate(record))
            except ValidationError as e:
                logger.warning(f"Skipping invalid campaign history entry {i}: {e}")

        logger.info(
            f"Loaded campaign state: brief={'set' if self._product_brief else 'empty'}, "
            f"framework={'set' if self._framework else 'none'}, history={len(self._history)}"
        )

