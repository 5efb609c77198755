"""Best-effort element probes that never raise."""

import logging
from typing import NamedTuple, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Locator, Page

logger = logging.getLogger(__name__)


class SelectorProbe(NamedTuple):
    selector: str
    timeout_ms: float


class ProbeMatch(NamedTuple):
    probe: SelectorProbe
    locator: Locator


async def is_visible_within(locator: Locator, timeout_ms: float) -> bool:
    """Wait up to timeout_ms for the locator to become visible.

    Playwright's TimeoutError subclasses its Error, so both a miss and a
    detached or invalid selector resolve to False.
    """
    try:
        await locator.wait_for(state="visible", timeout=timeout_ms)
    except PlaywrightError as e:
        logger.debug(f"Probe missed after {timeout_ms}ms: {e}")
        return False
    return True


async def first_visible(page: Page, probes: Sequence[SelectorProbe]) -> Optional[ProbeMatch]:
    """Return the first probe whose selector becomes visible, in order."""
    for probe in probes:
        locator = page.locator(probe.selector).first
        if await is_visible_within(locator, probe.timeout_ms):
            logger.debug(f"Probe matched: {probe.selector}")
            return ProbeMatch(probe, locator)
    return None


def probes_for(selectors: Sequence[str], timeout_ms: float) -> list[SelectorProbe]:
    return [SelectorProbe(selector, timeout_ms) for selector in selectors]
