"""Error taxonomy for brievify.

Every error here is recoverable by the user: callers show the message and
keep the prior state.
"""


class BrievifyError(Exception):
    """Base class for all user-facing brievify errors."""


# --- Auth ---

class AccountExists(BrievifyError):
    def __init__(self, email):
        super().__init__(f"User already exists: {email}. Please log in.")
        self.email = email


class InvalidCredentials(BrievifyError):
    def __init__(self):
        super().__init__("Invalid email or password.")


class NotAuthenticated(BrievifyError):
    def __init__(self, action="this action"):
        super().__init__(f"You must be logged in to perform {action}.")


# --- Generation ---

class MissingBrief(BrievifyError):
    def __init__(self):
        super().__init__("Please complete your onboarding to set up your product brief first.")


class EmptyAssetSelection(BrievifyError):
    def __init__(self):
        super().__init__("Select at least one campaign asset to generate.")


class GenerationInProgress(BrievifyError):
    def __init__(self):
        super().__init__("A generation is already running for this session. Please wait for it to finish.")


class SessionChanged(BrievifyError):
    def __init__(self):
        super().__init__("You logged out or switched account while the generation was running. The result was discarded.")


class MalformedGenerationResult(BrievifyError):
    def __init__(self, reason, raw_text=None):
        super().__init__(f"The AI returned an unusable result: {reason}")
        self.reason = reason
        self.raw_text = raw_text


class GenerationServiceError(BrievifyError):
    """Transport or provider failure while calling the generation service."""

    status = None
    detail = None


class ServiceUnavailable(GenerationServiceError):
    def __init__(self, detail):
        super().__init__(f"Generation service unavailable: {detail}")
        self.detail = detail


class ProviderNotConfigured(ServiceUnavailable):
    """No API key is configured for the selected provider."""


class ServiceError(GenerationServiceError):
    def __init__(self, status, detail):
        super().__init__(f"Generation service error! Status: {status}, Details: {detail}")
        self.status = status
        self.detail = detail


# --- Flow ---

class NavigationRejected(BrievifyError):
    def __init__(self, current, target):
        super().__init__(f"Cannot open {target.value} from {current.value}.")
        self.current = current
        self.target = target
