"""Session credential persistence and validation"""

import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

import orjson
from loguru import logger

from .browser import BrowserFactory, launch_browser, new_page
from .config import (
    ACCOUNT_URL,
    DEFAULT_COOKIE_FILE,
    SESSION_STALE_AGE,
    SITE_DOMAIN,
    VALIDATION_TIMEOUT_MS,
)
from .exceptions import NotAuthenticatedError, SessionInvalidError
from .models import CookieRecord, SessionCredential

log = logger.bind(component="session")

SESSION_COOKIE_HINTS = ("session", "auth", "token")


@dataclass
class SessionValidation:
    """Result of checking the stored session against the live site"""

    valid: bool
    reason: str


def is_login_url(url: str) -> bool:
    """The site bounces unauthenticated account requests to a /login path"""
    return "/login" in url


class SessionStore:
    """
    Owns the stored browser-session credential.

    The credential is a single JSON file ({"cookies": [...], "savedAt": ms}).
    Writes replace the whole file atomically, so concurrent readers see
    either the old credential or the new one, never a partial write.
    """

    def __init__(
        self,
        cookie_file: Path = DEFAULT_COOKIE_FILE,
        browser_factory: BrowserFactory = launch_browser,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize session store.

        Args:
            cookie_file: Path to the credential JSON file
            browser_factory: Launches the hidden browser used by validate()
            clock: Returns the current time in epoch seconds
        """
        self.cookie_file = cookie_file
        self.browser_factory = browser_factory
        self.clock = clock

        log.debug(f"Session store initialized: {cookie_file}")

    def _now_ms(self) -> int:
        return int(self.clock() * 1000)

    def _read(self) -> Optional[SessionCredential]:
        """Parse the credential file; missing, corrupt or empty all read as None"""
        if not self.cookie_file.exists():
            return None

        try:
            data = orjson.loads(self.cookie_file.read_bytes())
            credential = SessionCredential.from_dict(data)
        except (OSError, orjson.JSONDecodeError, KeyError, TypeError, AttributeError) as e:
            log.warning(f"Stored credential unreadable ({self.cookie_file}): {e}")
            return None

        if not credential.cookies:
            return None

        return credential

    def _check_staleness(self, credential: SessionCredential) -> None:
        """Advisory only: an old session is still reported as present"""
        if credential.saved_at:
            age = (self._now_ms() - credential.saved_at) / 1000
            if age > SESSION_STALE_AGE:
                log.warning(
                    f"Session is older than {SESSION_STALE_AGE // 86400} days "
                    f"({age / 86400:.1f} days), may be expired"
                )

        has_session_cookie = any(
            SITE_DOMAIN in c.domain and any(hint in c.name.lower() for hint in SESSION_COOKIE_HINTS)
            for c in credential.cookies
        )
        if not has_session_cookie:
            log.warning("No obvious session cookie found")

    def has_valid_credential(self) -> bool:
        """True iff a credential exists, parses and holds at least one cookie"""
        credential = self._read()
        if credential is None:
            return False

        self._check_staleness(credential)
        return True

    def get_credential(self) -> Optional[SessionCredential]:
        return self._read()

    def require_credential(self) -> SessionCredential:
        """Stored credential, or NotAuthenticatedError when there is none"""
        credential = self._read()
        if credential is None:
            raise NotAuthenticatedError()
        return credential

    def save(self, cookies: Iterable[Union[CookieRecord, Dict[str, Any]]]) -> SessionCredential:
        """
        Replace the stored credential with these cookies.

        Args:
            cookies: CookieRecords or Playwright cookie dicts

        Returns:
            The credential as written
        """
        records: List[CookieRecord] = [
            c if isinstance(c, CookieRecord) else CookieRecord.from_dict(c) for c in cookies
        ]
        credential = SessionCredential(cookies=records, saved_at=self._now_ms())

        self.cookie_file.parent.mkdir(parents=True, exist_ok=True)
        payload = orjson.dumps(credential.to_dict(), option=orjson.OPT_INDENT_2)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.cookie_file.parent, prefix=f".{self.cookie_file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.cookie_file)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        log.info(f"💾 Saved {len(records)} cookies to: {self.cookie_file}")
        return credential

    def delete(self) -> None:
        """Remove the stored credential (no-op when there is none)"""
        if self.cookie_file.exists():
            self.cookie_file.unlink(missing_ok=True)
            log.info("🗑️ Stored session deleted")

    def status(self) -> Dict[str, Any]:
        """Login summary: whether a credential is present, when it was saved, cookie count"""
        credential = self._read()
        return {
            "logged_in": credential is not None,
            "saved_at": credential.saved_at if credential else None,
            "cookie_count": len(credential.cookies) if credential else 0,
        }

    async def validate(self) -> SessionValidation:
        """
        Load the account page with the stored cookies.

        A redirect to the login page means the session is dead: the
        credential is deleted so it cannot linger as a false positive.
        Automation errors report invalid but leave the credential alone.
        """
        credential = self._read()
        if credential is None:
            return SessionValidation(valid=False, reason="Not logged in. Please log in first.")

        try:
            async with self.browser_factory(True) as browser:
                page = await new_page(browser, credential)
                await page.goto(ACCOUNT_URL, wait_until="networkidle", timeout=VALIDATION_TIMEOUT_MS)
                url = page.url
        except Exception as e:
            log.error(f"Session validation failed: {e}")
            return SessionValidation(valid=False, reason=str(e) or type(e).__name__)

        if is_login_url(url):
            log.warning(f"Session expired: account page redirected to {url}")
            self.delete()
            return SessionValidation(valid=False, reason="Session expired. Please log in again.")

        log.success("✓ Session is valid")
        return SessionValidation(valid=True, reason="Session is valid")

    async def require_valid(self) -> None:
        """Validate, raising SessionInvalidError (or NotAuthenticatedError) on failure"""
        if self._read() is None:
            raise NotAuthenticatedError()

        result = await self.validate()
        if not result.valid:
            raise SessionInvalidError(result.reason)
