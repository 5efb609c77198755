"""Page object for the single-page application reached after login."""

from datetime import UTC, datetime
from pathlib import Path
from typing import NamedTuple, Optional

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from keycloak_e2e.logging_config import get_logger
from keycloak_e2e.probes import first_visible, probes_for

logger = get_logger()

LOGOUT_SELECTORS = [
    'button:has-text("Logout")',
    'button:has-text("Log out")',
    'button:has-text("Sign out")',
    'a:has-text("Logout")',
    'a:has-text("Log out")',
    'a:has-text("Sign out")',
    '[data-testid="logout"]',
    '[id*="logout"]',
    '[class*="logout"]',
    ".logout-btn",
    "#logout",
    "#kc-logout",
    'a[href*="logout"]',
]

LOGOUT_PROBE_TIMEOUT_MS = 1000


class LogoutResult(NamedTuple):
    method: str  # "control" or "endpoint"
    selector: Optional[str] = None


class ApplicationPage:
    def __init__(self, page: Page, artifacts_dir: str = "test-results"):
        self.page = page
        self.artifacts_dir = Path(artifacts_dir)

    async def get_title(self) -> str:
        return await self.page.title()

    async def wait_for_network_idle(self, timeout: Optional[float] = None) -> bool:
        try:
            await self.page.wait_for_load_state("networkidle", timeout=timeout)
        except PlaywrightError:
            logger.warning("Network not idle, continuing")
            return False
        return True

    async def logout(self, fallback_logout_url: str) -> LogoutResult:
        """Click the first visible logout control, or hit the provider's logout endpoint."""
        match = await first_visible(self.page, probes_for(LOGOUT_SELECTORS, LOGOUT_PROBE_TIMEOUT_MS))
        if match is not None:
            logger.info(f"Found logout element: {match.probe.selector}")
            await match.locator.click()
            return LogoutResult("control", match.probe.selector)

        logger.warning("No logout control found, navigating to the provider logout URL")
        await self.page.goto(fallback_logout_url)
        return LogoutResult("endpoint")

    async def reload(self) -> None:
        await self.page.reload()

    async def take_screenshot(self, name: str, timestamped: bool = False) -> Path:
        """Save a full-page PNG under the artifacts directory and return its path."""
        self.artifacts_dir.mkdir(parents=True, exist_ok=True)
        if timestamped:
            stamp = datetime.now(UTC).isoformat().replace(":", "-").replace(".", "-")
            name = f"{name}-{stamp}"
        path = self.artifacts_dir / f"{name}.png"
        await self.page.screenshot(path=str(path), full_page=True)
        logger.info(f"Screenshot saved: {path}")
        return path
