"""Page object for the Keycloak login form."""

import asyncio
from typing import Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

from keycloak_e2e.exceptions import ElementNotInteractableError, PageNotReadyError
from keycloak_e2e.logging_config import get_logger
from keycloak_e2e.probes import first_visible, is_visible_within, probes_for

logger = get_logger()

USERNAME_SELECTOR = 'input[name="username"]'
PASSWORD_SELECTOR = 'input[name="password"]'
LOGIN_BUTTON_SELECTOR = "#kc-login"
ERROR_MESSAGE_SELECTOR = "#input-error"
LOGIN_FORM_SELECTOR = "#kc-form-login"
TITLE_SELECTOR = ".pf-c-title"
SOCIAL_LOGIN_SELECTOR = ".social-provider-button"

# Keycloak themes do not agree on where the error ends up
ALTERNATIVE_ERROR_SELECTORS = [
    ".alert-error",
    ".error-message",
    '[role="alert"]',
    ".kc-feedback-text",
]

ERROR_PROBE_TIMEOUT_MS = 2000
ALTERNATIVE_ERROR_PROBE_TIMEOUT_MS = 500
TITLE_PROBE_TIMEOUT_MS = 1000
LOGIN_GRACE_PERIOD_MS = 2000


class KeycloakLoginPage:
    """Domain operations on the Keycloak login page.

    Scenarios use these methods instead of raw selectors. Detection methods
    (``has_error_message``, ``verify_successful_login``) return booleans so a
    changed theme lowers a scenario's confidence instead of crashing it.
    """

    def __init__(
        self, page: Page, visible_timeout_ms: float = 5000, navigation_timeout_ms: float = 15000
    ):
        self.page = page
        self.visible_timeout_ms = visible_timeout_ms
        self.navigation_timeout_ms = navigation_timeout_ms

        self.username_input = page.locator(USERNAME_SELECTOR)
        self.password_input = page.locator(PASSWORD_SELECTOR)
        self.login_button = page.locator(LOGIN_BUTTON_SELECTOR)
        self.error_message = page.locator(ERROR_MESSAGE_SELECTOR)
        self.login_form = page.locator(LOGIN_FORM_SELECTOR)
        self.title = page.locator(TITLE_SELECTOR)
        self.social_login_buttons = page.locator(SOCIAL_LOGIN_SELECTOR)

    async def _require_visible(self, **elements: Locator) -> None:
        # All elements share one timeout window
        visible = await asyncio.gather(
            *(is_visible_within(locator, self.visible_timeout_ms) for locator in elements.values())
        )
        missing = [name for name, shown in zip(elements, visible) if not shown]
        if missing:
            raise PageNotReadyError(missing, self.visible_timeout_ms)

    async def navigate_to_login(self, auth_url: str) -> None:
        """Open the auth URL and wait for the network to settle.

        Navigation errors propagate. A page that never reaches ``networkidle``
        within the navigation timeout is tolerated.
        """
        await self.page.goto(auth_url)
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self.navigation_timeout_ms)
        except PlaywrightError:
            logger.warning(f"Network did not settle within {self.navigation_timeout_ms}ms: {auth_url}")

    async def verify_login_page_loaded(self) -> None:
        await self._require_visible(
            login_form=self.login_form,
            username_input=self.username_input,
            password_input=self.password_input,
            login_button=self.login_button,
        )

    async def _fill(self, name: str, locator: Locator, value: str) -> None:
        await self._require_visible(**{name: locator})
        try:
            await locator.fill(value)
        except PlaywrightError as e:
            raise ElementNotInteractableError(name, str(e)) from e

    async def fill_username(self, username: str) -> None:
        await self._fill("username_input", self.username_input, username)

    async def fill_password(self, password: str) -> None:
        await self._fill("password_input", self.password_input, password)

    async def click_login(self) -> None:
        """Click the submit button.

        Does not wait for the resulting navigation; callers decide how long to
        observe the page afterwards.
        """
        await self._require_visible(login_button=self.login_button)
        if not await self.login_button.is_enabled():
            raise ElementNotInteractableError("login_button", "button is disabled")
        await self.login_button.click()

    async def login(self, username: str, password: str) -> None:
        await self.fill_username(username)
        await self.fill_password(password)
        await self.click_login()

    async def has_error_message(self) -> bool:
        """Best-effort check for a visible login error.

        A False result does not prove the login succeeded.
        """
        if await is_visible_within(self.error_message, ERROR_PROBE_TIMEOUT_MS):
            return True

        match = await first_visible(
            self.page, probes_for(ALTERNATIVE_ERROR_SELECTORS, ALTERNATIVE_ERROR_PROBE_TIMEOUT_MS)
        )
        if match is None:
            logger.debug("No login error message found")
            return False

        logger.debug(f"Login error found via fallback selector {match.probe.selector}")
        return True

    async def verify_login_error(self, expected_error_message: Optional[str] = None) -> None:
        await self._require_visible(error_message=self.error_message)
        if expected_error_message:
            text = await self.error_message.text_content() or ""
            assert expected_error_message in text, (
                f"Expected error containing {expected_error_message!r}, got {text!r}"
            )

    async def get_page_title(self) -> str:
        return await self.page.title()

    async def get_form_title(self) -> Optional[str]:
        """Heading of the login card, or None when the theme renders none."""
        if not await is_visible_within(self.title, TITLE_PROBE_TIMEOUT_MS):
            return None
        return (await self.title.text_content() or "").strip()

    async def count_social_login_buttons(self) -> int:
        return await self.social_login_buttons.count()

    async def wait_for_login_redirect(self, timeout: float = 30000) -> None:
        """Wait for the URL to change away from the login form, then for network idle."""
        start_url = self.page.url
        await self.page.wait_for_url(lambda url: url != start_url, timeout=timeout)
        await self.page.wait_for_load_state("networkidle", timeout=timeout)

    async def verify_successful_login(self, expected_url_fragment: str = "localhost:3000") -> bool:
        """Give a redirect a fixed grace period, then check the URL contains the fragment."""
        await self.page.wait_for_timeout(LOGIN_GRACE_PERIOD_MS)
        return expected_url_fragment in self.page.url

    async def clear_form(self) -> None:
        await self.username_input.clear()
        await self.password_input.clear()

    async def get_username_value(self) -> str:
        return await self.username_input.input_value()

    async def get_password_value(self) -> str:
        return await self.password_input.input_value()

    async def get_username_placeholder(self) -> Optional[str]:
        return await self.username_input.get_attribute("placeholder")

    async def get_password_placeholder(self) -> Optional[str]:
        return await self.password_input.get_attribute("placeholder")

    async def are_form_fields_enabled(self) -> bool:
        return (
            await self.username_input.is_enabled()
            and await self.password_input.is_enabled()
            and await self.login_button.is_enabled()
        )

    async def is_username_visible(self, timeout: float = 1000) -> bool:
        return await is_visible_within(self.username_input, timeout)
