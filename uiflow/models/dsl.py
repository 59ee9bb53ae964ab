from typing import List, Optional, Dict, Any, Literal
from pydantic import BaseModel, ConfigDict, Field, SecretStr, model_validator

from uiflow.models.locator import Locator

ELEMENT_ACTIONS = {
    "click", "right_click", "double_click", "hover", "type", "fill", "clear",
    "press", "select", "check", "upload_file", "select_menu_item",
    "wait_for", "assert_visible", "assert_text",
}
CONDITION_ACTIONS = {"assert_hidden", "wait_for_url", "wait_for_requests"}
NAVIGATION_ACTIONS = {"goto"}

Action = Literal[
    "goto", "click", "right_click", "double_click", "hover", "type", "fill", "clear",
    "press", "select", "check", "upload_file", "select_menu_item",
    "wait_for", "assert_visible", "assert_text",
    "assert_hidden", "wait_for_url", "wait_for_requests",
]

# Actions that need a value to do anything
_VALUE_REQUIRED = {"goto", "type", "fill", "select", "upload_file", "select_menu_item",
                   "assert_text", "wait_for_url", "wait_for_requests"}


class Step(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    action: Action = Field(..., description="Action to perform, e.g. 'goto', 'click', 'type', 'wait_for'")
    locator: Optional[Locator] = Field(None, description="Element the action applies to")
    value: Optional[str] = Field(None, description="Text to type, URL to visit, sub-menu entry, expected text...")
    description: Optional[str] = None
    timeout_ms: Optional[int] = Field(None, gt=0, description="Overrides the runner default timeout")
    best_effort: bool = Field(False, description="A failure is recorded but does not stop the scenario")
    force: bool = Field(False, description="Skip actionability checks (hidden or covered elements)")
    args: Dict[str, Any] = Field(default_factory=dict, description="Additional arguments")

    @model_validator(mode="after")
    def _check_shape(self):
        if (self.action in ELEMENT_ACTIONS or self.action == "assert_hidden") and self.locator is None:
            raise ValueError(f"Action '{self.action}' needs a locator")
        if self.action in _VALUE_REQUIRED and self.value is None:
            raise ValueError(f"Action '{self.action}' needs a value")
        if self.action == "press" and self.value is None:
            raise ValueError("Action 'press' needs a key name as value")
        if self.action == "wait_for_requests" and not str(self.value).isdigit():
            raise ValueError("Action 'wait_for_requests' needs an integer value")
        return self

    @property
    def needs_element(self) -> bool:
        return self.action in ELEMENT_ACTIONS

    def label(self) -> str:
        if self.description:
            return self.description
        target = f" {self.locator.describe()}" if self.locator is not None else ""
        value = f" {self.value!r}" if self.value is not None else ""
        return f"{self.action}{target}{value}"


class Scenario(BaseModel):
    name: str
    description: Optional[str] = None
    url: Optional[str] = Field(None, description="Entry page visited before the first step")
    steps: List[Step]

    def entry_steps(self) -> List[Step]:
        if not self.url:
            return list(self.steps)
        return [Step(action="goto", value=self.url, description=f"visit {self.url}")] + list(self.steps)


class SessionConfig(BaseModel):
    """How to open and authenticate one Session."""
    base_url: str
    username: str
    password: SecretStr
    login_url: Optional[str] = Field(None, description="Defaults to base_url")
    marker: Locator = Field(..., description="Element that only exists once logged in")
    username_locators: List[Locator] = Field(default_factory=lambda: [
        Locator(css="input[name='username']"),
        Locator(label="Username"),
        Locator(placeholder="Username"),
    ])
    password_locators: List[Locator] = Field(default_factory=lambda: [
        Locator(css="input[name='password']"),
        Locator(label="Password"),
        Locator(placeholder="Password"),
    ])
    submit_locators: List[Locator] = Field(default_factory=lambda: [
        Locator(css="button[type='submit']"),
        Locator(css="input[type='submit']"),
        Locator(role="button", name="Login"),
        Locator(role="button", name="Sign in"),
    ])
    login_timeout_ms: Optional[int] = Field(None, gt=0)

    @property
    def effective_login_url(self) -> str:
        return self.login_url or self.base_url


class SuiteDefinition(BaseModel):
    """One scenario file: a session block plus the scenarios run against it."""
    name: str
    source: Optional[str] = None
    session: Dict[str, Any] = Field(default_factory=dict)
    scenarios: List[Scenario]
