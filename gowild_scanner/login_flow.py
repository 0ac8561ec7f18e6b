"""Interactive login: a visible browser the user signs in with by hand"""

from contextlib import AsyncExitStack
from dataclasses import dataclass
from typing import Callable, Optional

from loguru import logger

from .browser import BrowserFactory, launch_browser, new_page
from .config import LOGIN_URL, NAVIGATION_TIMEOUT_MS, SITE_DOMAIN
from .exceptions import LoginFlowError
from .models import LoginState, PollStatus
from .session_store import SessionStore

log = logger.bind(component="login")


def is_logged_in_url(url: str) -> bool:
    """
    Guess from the URL alone whether the user has finished logging in.

    Account/dashboard pages are a sure sign; otherwise any page on the
    site that is not the login page counts.
    """
    if "/myfrontier/my-account" in url or "/myfrontier/dashboard" in url:
        return True
    return SITE_DOMAIN in url and "/login" not in url


@dataclass
class LoginStatus:
    """What a start/poll call reports back to its caller"""

    status: str
    message: str
    state: LoginState


class LoginFlow:
    """
    Single-slot login state machine.

    idle -> launching -> waiting_for_login -> logged_in | error | cancelled

    Polling is driven by the caller; nothing here runs in the background
    and there is no overall timeout. Callers are expected to cancel().
    """

    def __init__(
        self,
        session_store: SessionStore,
        browser_factory: BrowserFactory = launch_browser,
        logged_in_predicate: Callable[[str], bool] = is_logged_in_url,
        login_url: str = LOGIN_URL,
    ):
        self.session_store = session_store
        self.browser_factory = browser_factory
        self.logged_in_predicate = logged_in_predicate
        self.login_url = login_url

        self.state = LoginState.IDLE
        self.message = ""
        self._stack: Optional[AsyncExitStack] = None
        self._browser = None
        self._page = None

    @property
    def active(self) -> bool:
        return self._stack is not None

    def _set_state(self, state: LoginState, message: str = "") -> None:
        if state != self.state:
            log.debug(f"Login flow: {self.state.value} → {state.value}")
        self.state = state
        self.message = message

    async def _close_browser(self) -> None:
        stack, self._stack = self._stack, None
        self._browser, self._page = None, None
        if stack is None:
            return
        try:
            await stack.aclose()
        except Exception as e:
            log.warning(f"Error closing login browser: {e}")

    def _window_gone(self) -> bool:
        """The user closed the tab or the browser went away under us"""
        if self._page.is_closed():
            return True
        return self._browser is not None and not self._browser.is_connected()

    async def start(self) -> LoginStatus:
        """
        Open a visible browser on the login page and return straight away.

        Any previous login browser is closed first.

        Raises:
            LoginFlowError: If the browser could not be launched or navigated
        """
        await self._close_browser()
        self._set_state(LoginState.LAUNCHING)

        stack = AsyncExitStack()
        self._stack = stack
        try:
            browser = await stack.enter_async_context(self.browser_factory(False))
            page = await new_page(browser)
            await page.goto(self.login_url, wait_until="networkidle", timeout=NAVIGATION_TIMEOUT_MS)
        except Exception as e:
            await self._close_browser()
            self._set_state(LoginState.ERROR, str(e))
            log.error(f"Could not start login flow: {e}")
            raise LoginFlowError(f"Failed to start login flow: {e}") from e

        self._browser, self._page = browser, page
        self._set_state(LoginState.WAITING_FOR_LOGIN, "Please log in to Frontier in the browser window")
        log.info("🔐 Login browser open, waiting for user to sign in")
        return LoginStatus(PollStatus.WAITING.value, self.message, self.state)

    async def poll(self) -> LoginStatus:
        """Check once whether the user has logged in; save cookies if so"""
        if self._stack is None or self._page is None:
            return LoginStatus(PollStatus.NO_BROWSER.value, "No login session in progress", self.state)

        if self._window_gone():
            log.warning("Login browser was closed before login completed")
            await self._close_browser()
            self._set_state(LoginState.IDLE)
            return LoginStatus(PollStatus.NO_BROWSER.value, "No login session in progress", self.state)

        try:
            url = self._page.url
            if not self.logged_in_predicate(url):
                return LoginStatus(
                    PollStatus.WAITING.value,
                    "Please log in to Frontier in the browser window",
                    self.state,
                )

            cookies = await self._page.context.cookies()
            self.session_store.save(cookies)
        except Exception as e:
            # Browser stays open: the caller can still cancel()
            self._set_state(LoginState.ERROR, str(e) or type(e).__name__)
            log.error(f"Login poll failed: {self.message}")
            return LoginStatus(PollStatus.ERROR.value, self.message, self.state)

        await self._close_browser()
        self._set_state(LoginState.LOGGED_IN, "Login successful! Cookies saved.")
        log.success("✅ Login successful, session saved")
        return LoginStatus(PollStatus.LOGGED_IN.value, self.message, self.state)

    async def cancel(self) -> None:
        """Close any open login browser and return to idle; safe to call anytime"""
        if self._stack is not None:
            await self._close_browser()
            self._set_state(LoginState.CANCELLED, "Login cancelled")
            log.info("Login flow cancelled")
        self._set_state(LoginState.IDLE)
