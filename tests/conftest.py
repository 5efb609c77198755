import os
import sys
from typing import Iterable, Optional
from unittest.mock import AsyncMock

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError
import pytest

# Add the project root to the path so imports work
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keycloak_e2e.config import Credentials, build_settings

STUB_AUTH_URL = (
    "https://idp.example.test/realms/lq/protocol/openid-connect/auth"
    "?client_id=loglines-fe&response_type=code&response_mode=fragment"
)
STUB_APP_URL = "http://app.example.test:3000"


class FakeLocator:
    """Stand-in for a Playwright Locator whose visibility is driven by FakePage."""

    def __init__(self, page: "FakePage", selector: str):
        self._page = page
        self.selector = selector
        self.value = ""
        self.enabled = True
        self.text = ""
        self.attributes: dict[str, str] = {}
        self.fill_error: Optional[Exception] = None

        self.wait_for = AsyncMock(side_effect=self._wait_for)
        self.fill = AsyncMock(side_effect=self._fill)
        self.clear = AsyncMock(side_effect=self._clear)
        self.click = AsyncMock(side_effect=self._click)
        self.is_enabled = AsyncMock(side_effect=lambda: self.enabled)
        self.input_value = AsyncMock(side_effect=lambda: self.value)
        self.text_content = AsyncMock(side_effect=lambda: self.text)
        self.get_attribute = AsyncMock(side_effect=lambda name: self.attributes.get(name))
        self.count = AsyncMock(side_effect=lambda: int(self.selector in self._page.visible))

    @property
    def first(self) -> "FakeLocator":
        return self

    async def _wait_for(self, state: str = "visible", timeout: Optional[float] = None):
        if self.selector in self._page.broken_selectors:
            raise PlaywrightError(f"Unexpected token in selector {self.selector}")
        if self.selector not in self._page.visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def _fill(self, value: str):
        if self.fill_error is not None:
            raise self.fill_error
        self.value = value

    async def _clear(self):
        self.value = ""

    async def _click(self):
        self._page.clicked.append(self.selector)
        on_click = self._page.on_click.get(self.selector)
        if on_click:
            self._page.url = on_click


class FakeContext:
    def __init__(self):
        self.cookie_jar: list[dict] = []
        self.cookies = AsyncMock(side_effect=lambda: list(self.cookie_jar))
        self.clear_cookies = AsyncMock(side_effect=self.cookie_jar.clear)


class FakePage:
    """Minimal async Page double covering the calls the page objects make."""

    def __init__(self, visible: Iterable[str] = (), url: str = "about:blank"):
        self.visible = set(visible)
        self.broken_selectors: set[str] = set()
        self.url = url
        self.clicked: list[str] = []
        self.on_click: dict[str, str] = {}
        self.page_title = "Sign in to lq"
        self.context = FakeContext()
        self._locators: dict[str, FakeLocator] = {}

        self.goto = AsyncMock(side_effect=self._goto)
        self.wait_for_load_state = AsyncMock()
        self.wait_for_timeout = AsyncMock()
        self.wait_for_url = AsyncMock()
        self.title = AsyncMock(side_effect=lambda: self.page_title)
        self.screenshot = AsyncMock()
        self.reload = AsyncMock()

    def locator(self, selector: str) -> FakeLocator:
        if selector not in self._locators:
            self._locators[selector] = FakeLocator(self, selector)
        return self._locators[selector]

    async def _goto(self, url: str, **kwargs):
        self.url = url


LOGIN_FORM_SELECTORS = [
    "#kc-form-login",
    'input[name="username"]',
    'input[name="password"]',
    "#kc-login",
]


@pytest.fixture
def settings():
    """Settings pointing at example hosts, resolved for a local run."""
    return build_settings(
        keycloak_auth_url=STUB_AUTH_URL,
        app_url=STUB_APP_URL,
        credentials=Credentials(username="devonebyone", password="Qq121212"),
        is_ci=False,
    )


@pytest.fixture
def login_form_page():
    """A fake page currently showing the Keycloak login form."""
    return FakePage(visible=LOGIN_FORM_SELECTORS, url=STUB_AUTH_URL)
