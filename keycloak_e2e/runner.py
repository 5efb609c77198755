"""Translate suite settings into pytest options.

The per-test budget is applied as a pytest-timeout marker. Workers and
reruns are passed to pytest-xdist and pytest-rerunfailures by the
``scripts/run_e2e.py`` entry point.
"""

from typing import Iterable, Sequence

import pytest

from keycloak_e2e.config import BrowserTimeouts, SuiteSettings


def per_test_timeout_seconds(timeouts: BrowserTimeouts) -> float:
    return timeouts.test_ms / 1000


def mark_test_timeouts(items: Iterable, timeouts: BrowserTimeouts, marker: str = "e2e") -> int:
    """Add a timeout marker to every collected item carrying ``marker``.

    Items with an explicit ``@pytest.mark.timeout`` keep theirs. Returns the
    number of items marked.
    """
    seconds = per_test_timeout_seconds(timeouts)
    marked = 0
    for item in items:
        if item.get_closest_marker(marker) is None or item.get_closest_marker("timeout"):
            continue
        item.add_marker(pytest.mark.timeout(seconds))
        marked += 1
    return marked


def build_pytest_args(
    settings: SuiteSettings,
    paths: Sequence[str] = ("tests/e2e",),
    extra_args: Sequence[str] = (),
) -> list[str]:
    """Command-line arguments for ``pytest.main`` honouring workers and retries."""
    args = [*paths, "-m", "e2e"]

    if settings.parallel_workers > 1:
        args.extend(["-n", str(settings.parallel_workers)])

    if settings.retry_count > 0:
        args.extend(["--reruns", str(settings.retry_count)])

    args.extend(extra_args)
    return args
