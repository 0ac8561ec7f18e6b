"""Browser launching for scans, session validation and interactive login"""

from typing import Any, AsyncContextManager, Callable, Optional

from .config import VIEWPORT
from .models import SessionCredential

# headless -> async context manager yielding a Playwright-compatible Browser
BrowserFactory = Callable[[bool], AsyncContextManager[Any]]


def launch_browser(headless: bool = True) -> AsyncContextManager[Any]:
    """Camoufox (Firefox) browser; closed when the context manager exits"""
    from camoufox.async_api import AsyncCamoufox

    return AsyncCamoufox(headless=headless)


async def new_page(browser, credential: Optional[SessionCredential] = None):
    """
    Open a fresh context and page, attaching stored cookies when given.

    Args:
        browser: Browser from a BrowserFactory
        credential: Session cookies to add before the first navigation

    Returns:
        The new page (its context is reachable as page.context)
    """
    context = await browser.new_context(viewport=VIEWPORT)
    if credential is not None:
        await context.add_cookies([c.to_dict() for c in credential.cookies])
    return await context.new_page()
