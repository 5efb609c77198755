"""Heuristic classification of authentication state from URLs and cookies.

These checks are approximate string matches on what the browser can see.
They do not validate the OAuth ``state`` parameter, exchange the code, or
verify any token signature. "Redirected away from the identity provider" is
treated as "authenticated", which is good enough to smoke-test the redirect
contract of a single-page application and nothing more.
"""

from typing import Iterable, Mapping, Optional, Sequence
from urllib.parse import parse_qs, urlsplit

from pydantic import BaseModel

AUTH_URL_MARKERS = ("code=", "session_state=", "access_token=", "id_token=")
REDIRECT_URL_MARKERS = ("code=", "session_state=")
SESSION_COOKIE_MARKERS = ("session", "token", "auth")
LOGGED_OUT_URL_MARKERS = ("keycloak", "login", "auth")


class SessionObservation(BaseModel):
    """Snapshot of what the browser exposes at one point in a scenario."""

    current_url: str
    cookies: list[dict] = []

    def cookie_names(self) -> list[str]:
        return [cookie.get("name", "") for cookie in self.cookies]


def has_authentication_indicators(url: str) -> bool:
    """Return True if the URL carries any OAuth/OIDC response parameter."""
    return any(marker in url for marker in AUTH_URL_MARKERS)


def has_redirect_markers(url: str) -> bool:
    return any(marker in url for marker in REDIRECT_URL_MARKERS)


def is_still_on_auth_page(url: str, origin: str) -> bool:
    """Return True if the URL is on the identity provider without a code or session state."""
    return origin in url and not has_redirect_markers(url)


def has_redirected_away(url: str, origin: str) -> bool:
    return not is_still_on_auth_page(url, origin)


def is_on_application(url: str, app_url: str, fallback_fragment: str = "localhost:3000") -> bool:
    return app_url in url or fallback_fragment in url


def looks_logged_out(url: str) -> bool:
    """Loose post-logout check: back on a login/auth page, or no code in the URL."""
    return any(marker in url for marker in LOGGED_OUT_URL_MARKERS) or "code=" not in url


def session_persisted(url: str, auth_path: str) -> bool:
    """After a reload, the session survived if we were not bounced to the auth endpoint."""
    return auth_path not in url


def session_cookies(
    cookies: Iterable[Mapping], markers: Sequence[str] = SESSION_COOKIE_MARKERS
) -> list[Mapping]:
    """Return cookies whose lower-cased name contains any of the markers."""
    return [
        cookie
        for cookie in cookies
        if any(marker in str(cookie.get("name", "")).lower() for marker in markers)
    ]


def classify(observation: SessionObservation, origin: str) -> bool:
    """Auth outcome for an observation: True when it looks authenticated."""
    return has_redirected_away(observation.current_url, origin)


def _url_params(url: str) -> dict[str, list[str]]:
    # Keycloak's response_mode=fragment puts the response after "#", often
    # behind an SPA route such as "#/login?&code=..."
    parts = urlsplit(url)
    params = parse_qs(parts.query, keep_blank_values=True)

    fragment = parts.fragment
    if "?" in fragment:
        fragment = fragment.split("?", 1)[1]
    for key, values in parse_qs(fragment, keep_blank_values=True).items():
        params.setdefault(key, []).extend(values)

    return params


def get_url_parameter(url: str, name: str) -> Optional[str]:
    values = _url_params(url).get(name)
    return values[0] if values else None


def extract_auth_code(url: str) -> Optional[str]:
    return get_url_parameter(url, "code")


def extract_session_state(url: str) -> Optional[str]:
    return get_url_parameter(url, "session_state")


def verify_url_parameters(url: str, expected: Mapping[str, Optional[str]]) -> None:
    """Assert the URL carries each expected parameter.

    A ``None`` value only requires the parameter to be present.
    """
    params = _url_params(url)
    for key, value in expected.items():
        assert key in params, f"Missing URL parameter {key!r} in {url}"
        if value is not None:
            assert params[key][0] == value, (
                f"URL parameter {key!r} is {params[key][0]!r}, expected {value!r}"
            )
