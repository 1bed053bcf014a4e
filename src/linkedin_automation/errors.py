"""Error taxonomy for LinkedIn automation.

Internal steps raise these instead of raw Playwright errors; only the
orchestrator facade (automation.py) turns them into failure envelopes.
Partial extraction is never an error: unresolved fields are carried as
None or the "unknown" sentinel inside a successful result.
"""

from typing import Optional


class LinkedInAutomationError(Exception):
    """Base class for all automation failures."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Render as a failure envelope."""
        return {
            "success": False,
            "message": self.message,
            "errorType": self.kind,
        }


class AuthenticationError(LinkedInAutomationError):
    """Login did not reach an authenticated state."""

    kind = "authentication"


class CredentialRejectedError(AuthenticationError):
    """The site rejected the submitted credentials."""

    kind = "credential_rejected"


class CheckpointRequiredError(AuthenticationError):
    """A checkpoint/challenge needs manual verification."""

    kind = "checkpoint_required"

    def to_dict(self) -> dict:
        result = super().to_dict()
        result["needsManualVerification"] = True
        return result


class IndeterminateLoginError(AuthenticationError):
    """Submission finished on an unrecognized state."""

    kind = "indeterminate"


class CredentialsRequiredError(AuthenticationError):
    """No saved session could be restored and no credentials were given."""

    kind = "credentials_required"


class NavigationError(LinkedInAutomationError):
    """A resource was unreachable or an expected marker never appeared."""

    kind = "navigation"

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class NavigationTimeoutError(NavigationError):
    """A bounded wait expired."""

    kind = "timeout"


class NotAuthenticatedError(LinkedInAutomationError):
    """An operation needing a session was attempted before login."""

    kind = "not_authenticated"

    def __init__(self, message: str = "Not logged in. Please log in first."):
        super().__init__(message)


class ExtractionError(LinkedInAutomationError):
    """No extraction strategy produced even a minimal record."""

    kind = "extraction"


class InvalidInputError(LinkedInAutomationError):
    """Caller supplied arguments that cannot be turned into a request."""

    kind = "invalid_input"
