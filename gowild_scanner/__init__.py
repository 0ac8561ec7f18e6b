"""Frontier GoWild Scanner
Browser-driven availability scanner with session management and result caching
"""

__version__ = "0.1.0"

from .browser_pool import BrowserSlotPool
from .cache import ResultCache, scan_cache_key
from .exceptions import (
    GoWildScannerError,
    InvalidRequestError,
    LoginFlowError,
    NotAuthenticatedError,
    RateLimitError,
    SessionInvalidError,
)
from .login_flow import LoginFlow, is_logged_in_url
from .models import (
    CookieRecord,
    FlightRecord,
    LoginState,
    PollStatus,
    Route,
    ScanResult,
    SessionCredential,
)
from .orchestrator import ScanOrchestrator
from .parser import FlightCardParser
from .rate_limiter import MinIntervalRateLimiter
from .scanner import ScanEngine
from .service import ScanService
from .session_store import SessionStore, SessionValidation

__all__ = [
    "__version__",
    "BrowserSlotPool",
    "ResultCache",
    "scan_cache_key",
    "GoWildScannerError",
    "InvalidRequestError",
    "LoginFlowError",
    "NotAuthenticatedError",
    "RateLimitError",
    "SessionInvalidError",
    "LoginFlow",
    "is_logged_in_url",
    "CookieRecord",
    "FlightRecord",
    "LoginState",
    "PollStatus",
    "Route",
    "ScanResult",
    "SessionCredential",
    "ScanOrchestrator",
    "FlightCardParser",
    "MinIntervalRateLimiter",
    "ScanEngine",
    "ScanService",
    "SessionStore",
    "SessionValidation",
]
