"""Browser context setup shared by the e2e fixtures and scripts."""

from playwright.async_api import BrowserContext, expect

from keycloak_e2e.config import BrowserTimeouts


def apply_timeouts(context: BrowserContext, timeouts: BrowserTimeouts) -> None:
    """Apply the action, navigation and assertion timeouts to a new context.

    ``expect`` options are process-wide in Playwright, so they are set again
    for every context rather than once per session.
    """
    context.set_default_timeout(timeouts.action_ms)
    context.set_default_navigation_timeout(timeouts.navigation_ms)
    expect.set_options(timeout=timeouts.expect_ms)
