"""E2E test configuration and fixtures for the Keycloak login suite.

By default the scenarios run against local stand-ins for the identity
provider and the SPA (see ``stub_idp.py``), started once per session in
background threads. Setting ``KEYCLOAK_URL`` switches to the live provider
and application described by the environment instead.

Playwright itself is started per test: session-scoped Playwright fixtures
deadlock with pytest-asyncio's per-test event loops.
"""

import os
import socket
import threading
import time

import httpx
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright
import pytest
import pytest_asyncio
import uvicorn

from keycloak_e2e.auth_state import has_redirect_markers
from keycloak_e2e.browser import apply_timeouts
from keycloak_e2e.config import build_settings, load_settings
from keycloak_e2e.logging_config import get_logger
from keycloak_e2e.pages.application_page import ApplicationPage
from keycloak_e2e.pages.login_page import KeycloakLoginPage
from keycloak_e2e.runner import mark_test_timeouts
from tests.e2e.stub_idp import LOGOUT_PATH, build_auth_url, create_idp_app, create_spa_app

logger = get_logger()

# Distinct host names keep the provider origin from matching app URLs
STUB_IDP_HOST = "127.0.0.1"
STUB_APP_HOST = "localhost"


def _free_port() -> int:
    sock = socket.socket()
    sock.bind(("", 0))
    port = sock.getsockname()[1]
    sock.close()
    return port


def _serve_in_thread(app, host: str, port: int, ready_path: str) -> str:
    def run_server():
        uvicorn.run(app, host=host, port=port, log_level="error")

    server_thread = threading.Thread(target=run_server, daemon=True)
    server_thread.start()

    server_url = f"http://{host}:{port}"
    for _ in range(30):  # Wait up to 30 seconds
        try:
            response = httpx.get(f"{server_url}{ready_path}", timeout=1)
            if response.status_code == 200:
                break
        except (httpx.RequestError, httpx.HTTPStatusError):
            time.sleep(1)
    else:
        raise RuntimeError(f"Stub server failed to start on {server_url}")

    return server_url


def pytest_collection_modifyitems(config, items):
    # TEST_TIMEOUT, or 30s locally and 60s on CI, bounds each e2e test
    mark_test_timeouts(items, load_settings().timeouts)


def pytest_runtest_makereport(item, call):
    # Expose each phase's outcome to fixtures so they can capture artifacts on failure
    if call.when == "call":
        item.failed_call = call.excinfo is not None


@pytest.fixture(scope="session")
def live_provider() -> bool:
    return bool(os.getenv("KEYCLOAK_URL"))


@pytest.fixture(scope="session")
def suite_settings(live_provider):
    """Settings for the whole e2e session, live or against the local stubs."""
    if live_provider:
        yield load_settings()
        return

    credentials = load_settings().credentials

    idp_port = _free_port()
    app_port = _free_port()
    idp_url = f"http://{STUB_IDP_HOST}:{idp_port}"
    app_url = f"http://{STUB_APP_HOST}:{app_port}"
    logout_url = f"{idp_url}{LOGOUT_PATH}"

    _serve_in_thread(
        create_idp_app(credentials.username, credentials.password),
        STUB_IDP_HOST,
        idp_port,
        "/health",
    )
    # uvicorn resolves "localhost" to the loopback it binds; the browser does the same
    _serve_in_thread(create_spa_app(logout_url), STUB_APP_HOST, app_port, "/")

    settings = build_settings(
        keycloak_auth_url=build_auth_url(idp_url, app_url),
        app_url=app_url,
        base_url=app_url,
        keycloak_logout_url=logout_url,
        credentials=credentials,
    )
    logger.info(f"Using stub identity provider at {idp_url} and app at {app_url}")
    yield settings


@pytest.fixture
def skip_on_ci_without_app(suite_settings, live_provider):
    """Dashboard scenarios need the real SPA, which CI does not run."""
    if live_provider and suite_settings.is_ci:
        pytest.skip(f"Skipping in CI - requires {suite_settings.app_url} to be running")


@pytest_asyncio.fixture
async def page(request, suite_settings):
    """Fresh browser, context and page per test, with suite timeouts applied."""
    async with async_playwright() as p:
        try:
            browser = await p.chromium.launch(headless=suite_settings.headless)
        except PlaywrightError as e:
            pytest.skip(f"Chromium is not available: {e}")

        context = await browser.new_context(ignore_https_errors=True)
        apply_timeouts(context, suite_settings.timeouts)
        page = await context.new_page()

        try:
            yield page
        finally:
            if getattr(request.node, "failed_call", False):
                await ApplicationPage(page, suite_settings.artifacts_dir).take_screenshot(
                    request.node.name, timestamped=True
                )
            await context.close()
            await browser.close()


@pytest.fixture
def login_page(page, suite_settings):
    return KeycloakLoginPage(
        page,
        visible_timeout_ms=suite_settings.timeouts.expect_ms,
        navigation_timeout_ms=suite_settings.timeouts.navigation_ms,
    )


@pytest.fixture
def app_page(page, suite_settings):
    return ApplicationPage(page, suite_settings.artifacts_dir)


@pytest_asyncio.fixture
async def authenticated_page(page, login_page, suite_settings):
    """Page that has already gone through a login attempt with the valid credentials.

    A failed login is logged, not raised, so tests can assert on the outcome
    themselves.
    """
    credentials = suite_settings.credentials
    try:
        await login_page.navigate_to_login(suite_settings.keycloak_auth_url)
        await login_page.verify_login_page_loaded()
        await login_page.login(credentials.username, credentials.password)

        await page.wait_for_timeout(5000)

        if not has_redirect_markers(page.url):
            logger.warning("Login may have failed, but continuing with test...")
    except Exception as e:
        logger.error(f"Login fixture error: {e}")

    yield page
