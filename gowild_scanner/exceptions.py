"""Custom exception classes for the GoWild scanner"""

from typing import List, Optional


class GoWildScannerError(Exception):
    """Base exception for scanner errors"""

    pass


class NotAuthenticatedError(GoWildScannerError):
    """Raised when no stored session credential is present"""

    def __init__(self, message: str = "Not logged in. Please log in first."):
        super().__init__(message)


class SessionInvalidError(GoWildScannerError):
    """Raised when the stored session redirects to the login page

    The credential has already been deleted by the time this is raised,
    so later checks report not-authenticated instead of retrying it.
    """

    pass


class RateLimitError(GoWildScannerError):
    """Raised when a scan batch is requested before the minimum interval

    Carries the remaining wait, rounded up to whole seconds.
    """

    def __init__(self, retry_after: int, message: Optional[str] = None):
        self.retry_after = retry_after
        super().__init__(message or f"Rate limited. Please wait {retry_after} seconds.")


class InvalidRequestError(GoWildScannerError):
    """Raised when a scan request fails validation"""

    def __init__(self, message: str = "Invalid request", details: Optional[List[str]] = None):
        self.details = details or []
        super().__init__(message)


class LoginFlowError(GoWildScannerError):
    """Raised when the interactive login browser cannot be started"""

    pass
