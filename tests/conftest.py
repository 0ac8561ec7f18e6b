import asyncio
from contextlib import asynccontextmanager
from pathlib import Path

import pytest

from gowild_scanner.session_store import SessionStore

FRONTIER_COOKIES = [
    {
        "name": "frontier_session",
        "value": "abc123",
        "domain": ".flyfrontier.com",
        "path": "/",
        "expires": 1900000000,
        "httpOnly": True,
        "secure": True,
        "sameSite": "Lax",
    },
    {
        "name": "visitor",
        "value": "v1",
        "domain": "www.flyfrontier.com",
        "path": "/",
        "expires": -1,
        "httpOnly": False,
        "secure": False,
        "sameSite": "None",
    },
]


class FakeClock:
    """Settable epoch-seconds clock"""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeCard:
    def __init__(self, text, error=None):
        self.text = text
        self.error = error

    async def text_content(self):
        if self.error:
            raise self.error
        return self.text


class FakePage:
    """Just enough of a Playwright page for the scanner, validator and login flow"""

    def __init__(self, content="", cards=None, goto_url=None, goto_error=None, goto_delay=0.0):
        self.html = content
        self.cards = cards or {}
        self.url = "about:blank"
        self.goto_url = goto_url
        self.goto_error = goto_error
        self.goto_delay = goto_delay
        self.visited = []
        self.waits = []
        self.selector_waits = []
        self.screenshots = []
        self.context = None
        self.closed = False

    def is_closed(self):
        return self.closed

    async def goto(self, url, wait_until=None, timeout=None):
        self.visited.append(url)
        if self.goto_delay:
            await asyncio.sleep(self.goto_delay)
        if self.goto_error:
            raise self.goto_error
        self.url = self.goto_url or url

    async def wait_for_timeout(self, ms):
        self.waits.append(ms)

    async def content(self):
        return self.html

    async def wait_for_selector(self, selector, timeout=None):
        self.selector_waits.append(selector)
        if not self.cards.get(selector):
            raise TimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return self.cards[selector][0]

    async def query_selector_all(self, selector):
        return list(self.cards.get(selector, []))

    async def screenshot(self, path, full_page=False):
        Path(path).write_bytes(b"\x89PNG fake")
        self.screenshots.append(path)


class FakeContext:
    def __init__(self, page, cookies=None):
        self.page = page
        page.context = self
        self.added_cookies = []
        self._cookies = cookies or []

    async def add_cookies(self, cookies):
        self.added_cookies.extend(cookies)

    async def new_page(self):
        return self.page

    async def cookies(self):
        return list(self._cookies)


class FakeBrowser:
    def __init__(self, factory, headless):
        self.factory = factory
        self.headless = headless
        self.contexts = []
        self.closed = False
        self.connected = True

    def is_connected(self):
        return self.connected and not self.closed

    async def new_context(self, viewport=None):
        context = FakeContext(self.factory.page_factory(), cookies=self.factory.cookies)
        self.contexts.append(context)
        return context

    @property
    def page(self):
        return self.contexts[-1].page


class FakeBrowserFactory:
    """Stands in for launch_browser; records every launch and close"""

    def __init__(self, page_factory=None, launch_error=None, cookies=None):
        self.page_factory = page_factory or FakePage
        self.launch_error = launch_error
        self.cookies = cookies or []
        self.browsers = []
        self.active = 0
        self.peak = 0

    def __call__(self, headless):
        return self._launch(headless)

    @asynccontextmanager
    async def _launch(self, headless):
        if self.launch_error:
            raise self.launch_error
        browser = FakeBrowser(self, headless)
        self.browsers.append(browser)
        self.active += 1
        self.peak = max(self.peak, self.active)
        try:
            yield browser
        finally:
            self.active -= 1
            browser.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def browser_factory():
    return FakeBrowserFactory()


@pytest.fixture
def session_store(tmp_path, browser_factory, clock):
    store = SessionStore(
        cookie_file=tmp_path / "data" / "cookies.json",
        browser_factory=browser_factory,
        clock=clock,
    )
    store.save(FRONTIER_COOKIES)
    return store


@pytest.fixture
def empty_session_store(tmp_path, browser_factory, clock):
    return SessionStore(
        cookie_file=tmp_path / "data" / "cookies.json",
        browser_factory=browser_factory,
        clock=clock,
    )
