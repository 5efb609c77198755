"""Small utilities shared by scenarios and tests."""

import secrets
import string

from playwright.async_api import Page

from keycloak_e2e.logging_config import get_logger

ALPHABET = string.ascii_letters + string.digits


def generate_random_string(length: int = 10) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))


async def wait_with_logging(page: Page, time_ms: float, message: str = "Waiting...") -> None:
    get_logger().info(f"{message} ({time_ms:.0f}ms)")
    await page.wait_for_timeout(time_ms)
