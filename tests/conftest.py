"""Shared fixtures: an in-memory stand-in for the Playwright browser.

FakeSite holds the pages (URL prefix -> HTML), the login behavior and the
structured responses; FakeLauncher hands the session a FakeContext whose
FakePage evaluates selectors against that HTML with BeautifulSoup.
"""

import asyncio
from typing import Dict, List, Optional

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from linkedin_automation.config import Config
from linkedin_automation.constants import FEED_URL, LOGIN_URL
from linkedin_automation.infrastructure.browser_launcher import BrowserLauncher
from linkedin_automation.infrastructure.timing_evasion import Pacer
from linkedin_automation.session import LinkedInSession

SESSION_COOKIE = "li_at"

LOGIN_HTML = """
<html><body>
  <form class="login__form">
    <input id="username" name="session_key" type="text">
    <input id="password" name="session_password" type="password">
    <button type="submit">Sign in</button>
  </form>
</body></html>
"""

FEED_HTML = """
<html><body>
  <nav id="global-nav" class="global-nav">Home</nav>
  <div class="feed-identity-module">Welcome</div>
</body></html>
"""


class FakeResponse:
    def __init__(self, url: str, body=None, ok: bool = True, stalled: bool = False):
        self.url = url
        self.ok = ok
        self._body = body
        # A stalled body never finishes downloading
        self.stalled = stalled

    async def json(self):
        if self.stalled:
            await asyncio.Event().wait()
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class FakeSite:
    """Scripted LinkedIn: what each URL renders and how login behaves."""

    def __init__(self):
        self.logged_in = False
        self.browser_cookies: List[dict] = []
        self.pages: Dict[str, str] = {
            LOGIN_URL: LOGIN_HTML,
            FEED_URL: FEED_HTML,
        }
        self.responses: Dict[str, List[FakeResponse]] = {}
        # Where the browser lands after the credential form is submitted
        self.post_submit_url = FEED_URL
        self.post_submit_html: Optional[str] = None
        self.navigation_error: Optional[Exception] = None

    @property
    def authenticated(self) -> bool:
        return self.logged_in or any(c.get("name") == SESSION_COOKIE for c in self.browser_cookies)

    def resolve(self, url: str) -> str:
        """Final URL after redirects."""
        if url.startswith(FEED_URL) and not self.authenticated:
            return "https://www.linkedin.com/uas/login?session_redirect=%2Ffeed%2F"
        return url

    def html_for(self, url: str) -> str:
        if url == self.post_submit_url and self.post_submit_html is not None:
            return self.post_submit_html
        if url in self.pages:
            return self.pages[url]
        if "/uas/login" in url or url.startswith(LOGIN_URL):
            return LOGIN_HTML
        matches = [prefix for prefix in self.pages if url.startswith(prefix)]
        if not matches:
            return "<html><body></body></html>"
        return self.pages[max(matches, key=len)]

    def submit(self, page: "FakePage") -> None:
        page.url = self.post_submit_url
        if self.post_submit_url.startswith(FEED_URL):
            self.logged_in = True
            self.browser_cookies.append(
                {"name": SESSION_COOKIE, "value": "token", "domain": ".www.linkedin.com", "path": "/"}
            )


class FakeElement:
    def __init__(self, page: "FakePage", selector: str, tag):
        self.page = page
        self.selector = selector
        self.tag = tag

    async def fill(self, value: str):
        self.page.typed[self.selector] = value

    async def type(self, text: str):
        self.page.typed[self.selector] = self.page.typed.get(self.selector, "") + text
        self.page.keystrokes += 1

    async def click(self):
        self.page.clicked.append(self.selector)
        self.page.events.append("click")
        if self.tag.name == "button" and self.tag.get("type") == "submit":
            self.page.site.submit(self.page)

    async def bounding_box(self):
        return None

    async def text_content(self):
        return self.tag.get_text()


class FakePage:
    def __init__(self, site: FakeSite):
        self.site = site
        self.url = "about:blank"
        self.main_frame = object()
        self.viewport_size = {"width": 1920, "height": 1080}
        self.goto_calls: List[str] = []
        self.typed: Dict[str, str] = {}
        self.keystrokes = 0
        self.clicked: List[str] = []
        self.evaluated: List[tuple] = []
        self.listeners: Dict[str, list] = {}
        # When set, waits that would time out block until cancelled instead
        self.hang_waits = False
        self.active_waits = 0
        self.events: List[str] = []

    def _soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.site.html_for(self.url), "html.parser")

    async def goto(self, url: str, wait_until: str = None, timeout: int = None):
        self.goto_calls.append(url)
        if self.site.navigation_error is not None:
            raise self.site.navigation_error
        self.url = self.site.resolve(url)
        for prefix, responses in self.site.responses.items():
            if url.startswith(prefix):
                for response in responses:
                    for handler in list(self.listeners.get("response", [])):
                        handler(response)
        return None

    async def content(self) -> str:
        return self.site.html_for(self.url)

    async def query_selector(self, selector: str):
        tag = self._soup().select_one(selector)
        if tag is None:
            return None
        return FakeElement(self, selector, tag)

    async def _hang(self):
        self.active_waits += 1
        try:
            await asyncio.Event().wait()
        finally:
            self.active_waits -= 1

    async def wait_for_selector(self, selector: str, state: str = None, timeout: int = None):
        element = await self.query_selector(selector)
        if element is None:
            if self.hang_waits:
                await self._hang()
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return element

    async def wait_for_event(self, event: str, predicate=None, timeout: int = None):
        self.events.append(f"wait:{event}")
        if self.hang_waits:
            await self._hang()
        if predicate is not None and not predicate(self.main_frame):
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {event}")
        return self.main_frame

    async def evaluate(self, expression: str, arg=None):
        self.evaluated.append((expression, arg))

    def on(self, event: str, handler):
        self.listeners.setdefault(event, []).append(handler)

    def remove_listener(self, event: str, handler):
        self.listeners.get(event, []).remove(handler)


class FakeContext:
    def __init__(self, site: FakeSite):
        self.site = site
        self.pages = [FakePage(site)]
        self.added_cookies: List[dict] = []

    async def new_page(self):
        page = FakePage(self.site)
        self.pages.append(page)
        return page

    async def add_cookies(self, cookies):
        self.added_cookies.extend(cookies)
        self.site.browser_cookies.extend(cookies)

    async def cookies(self):
        return list(self.site.browser_cookies)


class FakeLauncher(BrowserLauncher):
    def __init__(self, site: FakeSite):
        self.site = site
        self.context: Optional[FakeContext] = None
        self.launch_count = 0
        self.close_count = 0

    async def launch(self, user_data_dir, config):
        self.launch_count += 1
        self.context = FakeContext(self.site)
        return self.context

    async def close(self):
        self.close_count += 1
        self.context = None

    @property
    def page(self) -> Optional[FakePage]:
        return self.context.pages[0] if self.context else None


@pytest.fixture
def site():
    return FakeSite()


@pytest.fixture
def launcher(site):
    return FakeLauncher(site)


@pytest.fixture
def config(tmp_path):
    return Config(
        user_data_dir=tmp_path / "profile",
        cookies_path=tmp_path / "cookies.json",
        headless=True,
        pacing_multiplier=0.0,
    )


@pytest.fixture
def session(config, launcher):
    return LinkedInSession(config, pacer=Pacer.instant(), launcher=launcher)


@pytest.fixture(autouse=True)
def no_env_credentials(monkeypatch):
    """Keep real credentials from the environment or a .env file out of tests."""
    monkeypatch.delenv("LINKEDIN_EMAIL", raising=False)
    monkeypatch.delenv("LINKEDIN_PASSWORD", raising=False)
