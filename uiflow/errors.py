from typing import Optional


class UIFlowError(Exception):
    """Base class for every error raised by uiflow."""


class ConfigError(UIFlowError):
    pass


class SessionClosedError(UIFlowError):
    """Raised when an operation targets a Session that has been torn down."""


class AuthenticationError(UIFlowError):
    """Login did not complete within the login timeout."""

    def __init__(self, message: str, login_url: Optional[str] = None):
        super().__init__(message)
        self.login_url = login_url


class ElementNotFoundError(UIFlowError):
    def __init__(self, locator, elapsed_ms: float):
        self.locator = locator
        self.elapsed_ms = elapsed_ms
        super().__init__(f"No element matching {locator.describe()} after {elapsed_ms:.0f}ms")


class ActionRejectedError(UIFlowError):
    """The element was found but the action could not be applied to it."""

    def __init__(self, action: str, reason: str, locator=None):
        super().__init__(action, reason)
        self.action = action
        self.reason = reason
        # the document layer does not know the locator; the driver fills it in
        self.locator = locator

    def __str__(self) -> str:
        target = f" on {self.locator.describe()}" if self.locator is not None else ""
        return f"Action '{self.action}'{target} rejected: {self.reason}"


class WaitTimeoutError(UIFlowError, TimeoutError):
    def __init__(self, description: str, elapsed_ms: float):
        self.description = description
        self.elapsed_ms = elapsed_ms
        super().__init__(f"Condition '{description}' not met after {elapsed_ms:.0f}ms")


class HookError(UIFlowError):
    """A lifecycle hook raised; the suite cannot be trusted to have run."""

    def __init__(self, event: str, hook, cause: Exception):
        self.event = event
        self.hook = hook
        self.cause = cause
        name = getattr(hook, "__name__", repr(hook))
        super().__init__(f"{event} hook {name} failed: {cause}")


class ScenarioFailedError(UIFlowError):
    def __init__(self, scenario: str, outcome):
        self.scenario = scenario
        self.outcome = outcome
        super().__init__(f"Scenario '{scenario}' failed: {outcome.summary()}")
