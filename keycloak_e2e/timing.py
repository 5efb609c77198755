"""Timing samples and threshold summaries for the performance scenarios."""

from contextlib import asynccontextmanager
import time
from typing import AsyncIterator, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import CDPSession, Page
from pydantic import BaseModel

from keycloak_e2e.logging_config import get_logger

logger = get_logger()


class TimingSample(BaseModel):
    operation_name: str
    started_at: float
    ended_at: Optional[float] = None

    @property
    def elapsed_ms(self) -> float:
        if self.ended_at is None:
            raise ValueError(f"Timing sample {self.operation_name!r} was never stopped")
        return (self.ended_at - self.started_at) * 1000


class TimingSummary(BaseModel):
    count: int
    mean_ms: float
    min_ms: float
    max_ms: float

    @property
    def spread_ms(self) -> float:
        return self.max_ms - self.min_ms


@asynccontextmanager
async def measure(operation_name: str) -> AsyncIterator[TimingSample]:
    """Time the body of the ``async with`` block on a monotonic clock.

    The sample is stopped even if the body raises, so callers can still
    report how long a failed operation took.
    """
    sample = TimingSample(operation_name=operation_name, started_at=time.monotonic())
    try:
        yield sample
    finally:
        sample.ended_at = time.monotonic()


def summarize(samples: Sequence[float]) -> TimingSummary:
    """Arithmetic mean, min and max over elapsed milliseconds."""
    if not samples:
        raise ValueError("Cannot summarize an empty list of timings")
    return TimingSummary(
        count=len(samples),
        mean_ms=sum(samples) / len(samples),
        min_ms=min(samples),
        max_ms=max(samples),
    )


async def enable_performance_metrics(page: Page) -> Optional[CDPSession]:
    """Start collecting Chrome DevTools performance metrics for the page.

    Only Chromium exposes a CDP session; other browsers return None.
    """
    try:
        client = await page.context.new_cdp_session(page)
    except PlaywrightError as e:
        logger.info(f"Performance metrics unavailable: {e}")
        return None

    await client.send("Performance.enable")
    return client


async def read_performance_metrics(client: Optional[CDPSession]) -> dict[str, float]:
    if client is None:
        return {}
    response = await client.send("Performance.getMetrics")
    return {metric["name"]: metric["value"] for metric in response.get("metrics", [])}
