#!/usr/bin/env python3
"""Login page health check.

Opens the configured Keycloak auth URL in a headless browser and verifies:
- The login form, username, password and submit controls render
- The page reaches DOMContentLoaded within the page-load threshold

Run this before the e2e suite to tell an unreachable identity provider
apart from a real regression.
"""

import asyncio
import os
import sys

from playwright.async_api import async_playwright

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from keycloak_e2e.config import load_settings
from keycloak_e2e.exceptions import PageNotReadyError
from keycloak_e2e.pages.login_page import KeycloakLoginPage
from keycloak_e2e.timing import measure


async def main():
    """Load the login page once and report timing and readiness."""
    settings = load_settings()
    threshold_ms = settings.thresholds.page_load_ms

    print("🔍 Login Page Health Check")
    print("=" * 60)
    print(f"🌐 KEYCLOAK_URL: {settings.auth_path}")
    print(f"🖥️  Environment: {settings.environment_label}")
    print(f"⏱️  Threshold: {threshold_ms}ms")
    print()

    async with async_playwright() as p:
        browser = await p.chromium.launch(headless=settings.headless)
        page = await browser.new_page()

        try:
            async with measure("page load") as sample:
                await page.goto(settings.keycloak_auth_url, wait_until="domcontentloaded")

            print(f"📊 Page load time: {sample.elapsed_ms:.0f}ms")

            login_page = KeycloakLoginPage(page, visible_timeout_ms=settings.timeouts.expect_ms)
            await login_page.verify_login_page_loaded()
            print("✅ Login form is visible")

        except PageNotReadyError as e:
            print(f"❌ Login form not ready: {e}")
            sys.exit(1)
        finally:
            await browser.close()

    if sample.elapsed_ms >= threshold_ms:
        print(f"❌ Page load exceeded {threshold_ms}ms")
        sys.exit(1)

    print("✅ Login page is healthy")
    sys.exit(0)


if __name__ == "__main__":
    asyncio.run(main())
