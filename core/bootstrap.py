import logging
from dataclasses import dataclass

from core.campaign_store import CampaignStateStore
from core.llm import GenerationService, LLMGenerationService
from core.proxy_client import PROXY_URL, ProxyGenerationService
from core.session import SessionManager
from core.store import PersistentStore
from workflows.flow import FlowController
from workflows.generation import GenerationOrchestrator

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    store: PersistentStore
    session: SessionManager
    campaigns: CampaignStateStore
    orchestrator: GenerationOrchestrator
    flow: FlowController


def default_generation_service(model_provider=None) -> GenerationService:
    if PROXY_URL:
        logger.info(f"Using generation proxy at {PROXY_URL}")
        return ProxyGenerationService(PROXY_URL)
    return LLMGenerationService(model_provider=model_provider)


def bootstrap(store_dir=None, service: GenerationService = None, model_provider=None) -> AppContext:
    """
    Wire the components for one session and restore persisted state.

    The session is restored before the campaign state, once per process.
    """
    store = PersistentStore(store_dir)
    campaigns = CampaignStateStore(store)
    session = SessionManager(store, campaign_store=campaigns)
    orchestrator = GenerationOrchestrator(session, campaigns, service or default_generation_service(model_provider))
    flow = FlowController(session)

    session.load_from_store()
    campaigns.load_from_store()
    return AppContext(store=store, session=session, campaigns=campaigns, orchestrator=orchestrator, flow=flow)
