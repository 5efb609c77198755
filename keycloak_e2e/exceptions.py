"""Error types raised by page objects and scenarios."""


class LoginSuiteError(Exception):
    """Base class for errors raised by the login suite."""


class ConfigurationError(LoginSuiteError):
    """An environment value could not be turned into a setting."""


class PageNotReadyError(LoginSuiteError):
    """Required elements did not become visible within the bounded wait."""

    def __init__(self, missing: list[str], timeout_ms: float):
        self.missing = missing
        self.timeout_ms = timeout_ms
        super().__init__(
            f"Elements not visible after {timeout_ms:.0f}ms: {', '.join(missing)}"
        )


class ElementNotInteractableError(LoginSuiteError):
    """A field was visible but could not be focused or filled."""

    def __init__(self, element: str, reason: str):
        self.element = element
        super().__init__(f"Cannot interact with {element}: {reason}")


class ScenarioStateError(LoginSuiteError):
    """A scenario step was attempted out of order."""
