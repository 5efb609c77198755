"""Suite configuration loaded from environment variables."""

from functools import lru_cache
import os
from typing import Optional
from urllib.parse import urlsplit

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from keycloak_e2e.exceptions import ConfigurationError

load_dotenv()

DEFAULT_USERNAME = "devonebyone"
DEFAULT_PASSWORD = "Qq121212"
DEFAULT_APP_URL = "http://localhost:3000"
DEFAULT_KEYCLOAK_AUTH_URL = (
    "https://keycloak-dev.logistical.one/realms/lq/protocol/openid-connect/auth"
    "?client_id=loglines-fe"
    "&redirect_uri=http%3A%2F%2Flocalhost%3A3000%2F%23%2Flogin%3F"
    "&state=66f1cf3b-ee9f-41da-a5a1-8f2423bbbdb2"
    "&response_mode=fragment&response_type=code&scope=openid"
    "&nonce=baca162c-a37e-4573-8ed9-49a37503f2c1"
    "&code_challenge=q5Z1up1GgLRkmIqcjHRSreZgdURHQ72I2ti_k5pyQhI"
    "&code_challenge_method=S256"
)


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    password: str


class PerformanceThresholds(BaseModel):
    """Upper bounds in milliseconds for the timed scenarios."""

    model_config = ConfigDict(frozen=True)

    page_load_ms: int
    login_response_ms: int
    sequential_login_mean_ms: int
    sequential_login_count: int = 3

    @classmethod
    def for_environment(cls, constrained: bool) -> "PerformanceThresholds":
        if constrained:
            return cls(page_load_ms=5000, login_response_ms=10000, sequential_login_mean_ms=15000)
        return cls(page_load_ms=3000, login_response_ms=5000, sequential_login_mean_ms=10000)


class BrowserTimeouts(BaseModel):
    model_config = ConfigDict(frozen=True)

    test_ms: int
    expect_ms: int
    navigation_ms: int
    action_ms: int

    @classmethod
    def for_environment(cls, constrained: bool, test_ms: Optional[int] = None) -> "BrowserTimeouts":
        if constrained:
            return cls(
                test_ms=test_ms or 60000, expect_ms=10000, navigation_ms=30000, action_ms=15000
            )
        return cls(test_ms=test_ms or 30000, expect_ms=5000, navigation_ms=15000, action_ms=10000)


class SuiteSettings(BaseModel):
    """Everything a scenario needs to know about its environment.

    Threshold and timeout values are resolved once, when the settings are
    built, so scenarios never consult the environment themselves.
    """

    model_config = ConfigDict(frozen=True)

    credentials: Credentials
    keycloak_auth_url: str
    app_url: str
    base_url: str
    keycloak_logout_url: str
    idp_origin: str
    is_ci: bool = False
    headless: bool = True
    retry_count: int = 2
    parallel_workers: int = 4
    artifacts_dir: str = "test-results"
    thresholds: PerformanceThresholds
    timeouts: BrowserTimeouts

    @property
    def auth_path(self) -> str:
        """Host and path of the authorization endpoint, without the query."""
        parts = urlsplit(self.keycloak_auth_url)
        return f"{parts.netloc}{parts.path}"

    @property
    def environment_label(self) -> str:
        return "CI" if self.is_ci else "Local"


def validate_url(name: str, value: str) -> str:
    """Ensure value is an absolute http(s) URL and strip any trailing slash."""
    if not value.startswith(("http://", "https://")):
        raise ConfigurationError(f"Invalid {name}: {value}. Must start with http:// or https://")
    return value.rstrip("/")


def derive_logout_url(auth_url: str) -> str:
    """Map an OpenID Connect ``/auth`` endpoint to the matching ``/logout`` one."""
    parts = urlsplit(auth_url)
    path = parts.path
    if path.endswith("/auth"):
        path = path[: -len("/auth")] + "/logout"
    return f"{parts.scheme}://{parts.netloc}{path}"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("true", "1", "yes")


def build_settings(**overrides) -> SuiteSettings:
    """Build settings from the environment, applying explicit overrides last."""
    is_ci = overrides.pop("is_ci", bool(os.getenv("CI")))

    auth_url = validate_url(
        "KEYCLOAK_URL",
        overrides.pop("keycloak_auth_url", None)
        or os.getenv("KEYCLOAK_URL")
        or DEFAULT_KEYCLOAK_AUTH_URL,
    )
    app_url = validate_url(
        "APP_URL", overrides.pop("app_url", None) or os.getenv("APP_URL") or DEFAULT_APP_URL
    )
    base_url = validate_url(
        "BASE_URL", overrides.pop("base_url", None) or os.getenv("BASE_URL") or app_url
    )
    logout_url = validate_url(
        "KEYCLOAK_LOGOUT_URL",
        overrides.pop("keycloak_logout_url", None)
        or os.getenv("KEYCLOAK_LOGOUT_URL")
        or derive_logout_url(auth_url),
    )
    idp_origin = overrides.pop("idp_origin", None) or urlsplit(auth_url).netloc

    credentials = overrides.pop(
        "credentials",
        Credentials(
            username=os.getenv("KEYCLOAK_USERNAME") or DEFAULT_USERNAME,
            password=os.getenv("KEYCLOAK_PASSWORD") or DEFAULT_PASSWORD,
        ),
    )

    test_timeout = _env_int("TEST_TIMEOUT", 0) or None

    return SuiteSettings(
        credentials=credentials,
        keycloak_auth_url=auth_url,
        app_url=app_url,
        base_url=base_url,
        keycloak_logout_url=logout_url,
        idp_origin=idp_origin,
        is_ci=is_ci,
        headless=overrides.pop("headless", _env_flag("HEADLESS", True)),
        retry_count=overrides.pop("retry_count", _env_int("RETRY_COUNT", 2)),
        parallel_workers=overrides.pop("parallel_workers", _env_int("PARALLEL_WORKERS", 4)),
        artifacts_dir=overrides.pop("artifacts_dir", None)
        or os.getenv("ARTIFACTS_DIR")
        or "test-results",
        thresholds=overrides.pop("thresholds", PerformanceThresholds.for_environment(is_ci)),
        timeouts=overrides.pop("timeouts", BrowserTimeouts.for_environment(is_ci, test_timeout)),
        **overrides,
    )


@lru_cache()
def load_settings() -> SuiteSettings:
    """Return the process-wide settings built from the environment."""
    return build_settings()
