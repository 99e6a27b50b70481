import logging
from enum import Enum

from core.errors import NavigationRejected

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    LOGGED_OUT = "login"
    ONBOARDING = "onboarding"
    DASHBOARD = "dashboard"
    CREATE_CAMPAIGN = "create-campaign"


# Pages an onboarded user may move between
_ONBOARDED_PAGES = {Stage.DASHBOARD, Stage.CREATE_CAMPAIGN, Stage.ONBOARDING}


def derive_stage(is_authenticated: bool, is_first_time_user: bool) -> Stage:
    if not is_authenticated:
        return Stage.LOGGED_OUT
    if is_first_time_user:
        return Stage.ONBOARDING
    return Stage.DASHBOARD


def can_navigate(derived: Stage, current: Stage, target: Stage) -> bool:
    """Whether `target` may be opened from `current` given the derived stage."""
    if derived is Stage.LOGGED_OUT:
        return False
    if derived is Stage.ONBOARDING:
        return target is Stage.ONBOARDING
    return current in _ONBOARDED_PAGES and target in _ONBOARDED_PAGES


class FlowController:
    """Tracks which page is open, derived from the SessionManager's state."""

    def __init__(self, session):
        self.session = session
        self._page = None
        self._page_owner = None

    @property
    def derived_stage(self) -> Stage:
        return derive_stage(self.session.is_authenticated, self.session.is_first_time_user)

    @property
    def stage(self) -> Stage:
        derived = self.derived_stage
        # a replaced Session resets the page
        if self._page is None or self._page_owner is not self.session.session:
            return derived
        return self._page

    def navigate(self, target) -> Stage:
        target = Stage(target)
        derived = self.derived_stage
        current = self.stage
        if not can_navigate(derived, current, target):
            logger.info(f"Navigation rejected: {current.value} -> {target.value}")
            raise NavigationRejected(current, target)
        self._page = target
        self._page_owner = self.session.session
        return target
