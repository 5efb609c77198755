"""Scenario runner sequencing page-object calls into named, logged steps."""

from contextlib import asynccontextmanager
from enum import Enum
from typing import AsyncIterator, Optional, Sequence

from playwright.async_api import Error as PlaywrightError

from keycloak_e2e.auth_state import (
    SESSION_COOKIE_MARKERS,
    SessionObservation,
    has_redirected_away,
    is_still_on_auth_page,
    session_cookies,
)
from keycloak_e2e.config import SuiteSettings
from keycloak_e2e.exceptions import ScenarioStateError
from keycloak_e2e.helpers import wait_with_logging
from keycloak_e2e.logging_config import get_logger, log_auth_observation, log_soft_check, log_step
from keycloak_e2e.pages.login_page import KeycloakLoginPage

logger = get_logger()

COOKIE_VALUE_PREVIEW_LENGTH = 20


class ScenarioState(str, Enum):
    NOT_STARTED = "not_started"
    NAVIGATED = "navigated"
    FORM_FILLED = "form_filled"
    SUBMITTED = "submitted"
    OBSERVED = "observed"
    PASSED = "passed"
    FAILED = "failed"


_LINEAR_ORDER = [
    ScenarioState.NOT_STARTED,
    ScenarioState.NAVIGATED,
    ScenarioState.FORM_FILLED,
    ScenarioState.SUBMITTED,
    ScenarioState.OBSERVED,
]


class LoginScenario:
    """One login scenario bound to a single page object.

    States advance strictly in order. Any exception escaping a ``step`` moves
    the scenario to FAILED and is re-raised so the test fails with it.
    """

    def __init__(self, name: str, login_page: KeycloakLoginPage, settings: SuiteSettings):
        self.name = name
        self.login_page = login_page
        self.page = login_page.page
        self.settings = settings
        self.state = ScenarioState.NOT_STARTED
        self.observations: list[SessionObservation] = []

    def _check_transition(self, target: ScenarioState) -> None:
        if self.state in (ScenarioState.PASSED, ScenarioState.FAILED):
            raise ScenarioStateError(f"{self.name}: already {self.state.value}")

        # Further observations after the first are allowed
        if target == self.state == ScenarioState.OBSERVED:
            return

        current = _LINEAR_ORDER.index(self.state)
        if _LINEAR_ORDER.index(target) != current + 1:
            raise ScenarioStateError(
                f"{self.name}: cannot move from {self.state.value} to {target.value}"
            )

    def _advance(self, target: ScenarioState) -> None:
        self._check_transition(target)
        self.state = target

    @asynccontextmanager
    async def step(self, title: str) -> AsyncIterator[None]:
        log_step(self.name, title, "start")
        try:
            yield
        except Exception as e:
            self.state = ScenarioState.FAILED
            log_step(self.name, title, "failed", error=e)
            raise
        log_step(self.name, title, "passed")

    async def open_login_page(self, auth_url: Optional[str] = None) -> None:
        self._check_transition(ScenarioState.NAVIGATED)
        await self.login_page.navigate_to_login(auth_url or self.settings.keycloak_auth_url)
        await self.login_page.verify_login_page_loaded()
        self._advance(ScenarioState.NAVIGATED)

    async def submit_credentials(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> None:
        """Fill whichever credentials are given and click login.

        Leaving a value as None leaves that field untouched, for the
        empty-field scenarios.
        """
        await self.fill_credentials(username, password)
        await self.submit()

    async def fill_credentials(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> None:
        self._check_transition(ScenarioState.FORM_FILLED)
        if username is not None:
            await self.login_page.fill_username(username)
        if password is not None:
            await self.login_page.fill_password(password)
        self._advance(ScenarioState.FORM_FILLED)

    async def submit(self) -> None:
        self._check_transition(ScenarioState.SUBMITTED)
        await self.login_page.click_login()
        self._advance(ScenarioState.SUBMITTED)

    async def settle(self, time_ms: float, message: str = "Waiting for redirect") -> None:
        await wait_with_logging(self.page, time_ms, message)

    async def observe(self) -> SessionObservation:
        self._check_transition(ScenarioState.OBSERVED)
        cookies = await self.page.context.cookies()
        observation = SessionObservation(current_url=self.page.url, cookies=list(cookies))
        self.observations.append(observation)
        self._advance(ScenarioState.OBSERVED)

        log_auth_observation(
            self.name,
            observation.current_url,
            len(observation.cookies),
            has_redirected_away(observation.current_url, self.settings.idp_origin),
        )
        return observation

    def redirected_away(self, observation: Optional[SessionObservation] = None) -> bool:
        observation = observation or self.latest_observation
        return has_redirected_away(observation.current_url, self.settings.idp_origin)

    def still_on_auth_page(self, observation: Optional[SessionObservation] = None) -> bool:
        observation = observation or self.latest_observation
        return is_still_on_auth_page(observation.current_url, self.settings.idp_origin)

    @property
    def latest_observation(self) -> SessionObservation:
        if not self.observations:
            raise ScenarioStateError(f"{self.name}: nothing observed yet")
        return self.observations[-1]

    async def wait_for_auth_redirect(self, timeout_ms: float) -> bool:
        """Wait until the page leaves the auth form; False if the timeout elapses first."""
        origin = self.settings.idp_origin
        try:
            await self.page.wait_for_url(
                lambda url: has_redirected_away(url, origin), timeout=timeout_ms
            )
        except PlaywrightError:
            logger.warning(f"{self.name}: no redirect within {timeout_ms:.0f}ms")
            return False
        return True

    def soft_check(self, name: str, condition: bool, detail: Optional[str] = None) -> bool:
        log_soft_check(self.name, name, bool(condition), detail)
        return bool(condition)

    def count_session_cookies(
        self,
        observation: Optional[SessionObservation] = None,
        markers: Sequence[str] = SESSION_COOKIE_MARKERS,
    ) -> int:
        """Log the cookies that look session-related and return how many there are."""
        observation = observation or self.latest_observation
        matches = session_cookies(observation.cookies, markers)
        for cookie in matches:
            preview = str(cookie.get("value", ""))[:COOKIE_VALUE_PREVIEW_LENGTH]
            logger.info(f"{self.name}: cookie {cookie.get('name')}: {preview}...")
        self.soft_check("session cookies present", bool(matches), f"{len(matches)} found")
        return len(matches)

    def finish(self) -> ScenarioState:
        if self.state != ScenarioState.FAILED:
            self.state = ScenarioState.PASSED
        logger.info(f"Scenario {self.name}: {self.state.value}")
        return self.state
