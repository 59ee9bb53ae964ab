import importlib
import os
from typing import Any, Callable, Dict, List, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from uiflow.errors import ConfigError

load_dotenv()

UIFLOW_BASE_URL = os.getenv("UIFLOW_BASE_URL", "http://localhost:3000/")
UIFLOW_USERNAME = os.getenv("UIFLOW_USERNAME")
UIFLOW_PASSWORD = os.getenv("UIFLOW_PASSWORD")
UIFLOW_DEFAULT_TIMEOUT_MS = int(os.getenv("UIFLOW_DEFAULT_TIMEOUT_MS", "10000"))
UIFLOW_POLL_INTERVAL_MS = int(os.getenv("UIFLOW_POLL_INTERVAL_MS", "100"))
UIFLOW_HEADLESS = os.getenv("UIFLOW_HEADLESS", "true").lower() == "true"

SESSION_START = "session_start"
SESSION_END = "session_end"

LifecycleHook = Callable[[str, Any], None]


def resolve_hook(path: str) -> LifecycleHook:
    """Imports a hook given as 'package.module:function'."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Hook '{path}' must look like 'package.module:function'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(f"Cannot import hook module '{module_name}': {e}") from e
    hook = getattr(module, attr, None)
    if not callable(hook):
        raise ConfigError(f"Hook '{path}' is not callable")
    return hook


class RunnerConfig(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    viewport_width: int = Field(1280, alias="viewportWidth", gt=0)
    viewport_height: int = Field(720, alias="viewportHeight", gt=0)
    base_url: str = Field(UIFLOW_BASE_URL, alias="baseUrl", validate_default=True)
    default_timeout_ms: int = Field(UIFLOW_DEFAULT_TIMEOUT_MS, alias="defaultTimeoutMs", gt=0)
    setup_hooks: List[LifecycleHook] = Field(default_factory=list, alias="setupHooks")
    poll_interval_ms: int = Field(UIFLOW_POLL_INTERVAL_MS, alias="pollIntervalMs", gt=0)
    action_timeout_ms: int = Field(2000, alias="actionTimeoutMs", gt=0)
    login_timeout_ms: int = Field(30000, alias="loginTimeoutMs", gt=0)
    headless: bool = UIFLOW_HEADLESS
    ignore_https_errors: bool = Field(False, alias="ignoreHttpsErrors")
    state_file: Optional[str] = Field(None, alias="stateFile", description="Where to save the login storage state")

    @field_validator("setup_hooks", mode="before")
    @classmethod
    def _load_hooks(cls, value):
        if value is None:
            return []
        hooks = []
        for item in value:
            hooks.append(resolve_hook(item) if isinstance(item, str) else item)
        return hooks

    @field_validator("base_url")
    @classmethod
    def _trailing_slash(cls, value: str) -> str:
        # urljoin drops the last path segment of a base without a trailing slash
        return value if value.endswith("/") else value + "/"

    def session_defaults(self) -> Dict[str, Any]:
        return {"base_url": self.base_url, "login_timeout_ms": self.login_timeout_ms}

    def session_overrides(self) -> Dict[str, Any]:
        """Credentials from the environment win over the ones written in scenario files."""
        overrides: Dict[str, Any] = {}
        if UIFLOW_USERNAME:
            overrides["username"] = UIFLOW_USERNAME
        if UIFLOW_PASSWORD:
            overrides["password"] = UIFLOW_PASSWORD
        return overrides


def load_runner_config(path: Optional[str] = None) -> RunnerConfig:
    if not path:
        return RunnerConfig()
    if not os.path.exists(path):
        raise ConfigError(f"Config file '{path}' not found")
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Error reading config {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a mapping")
    # Accept the e2e section layout of runner config files
    data = data.get("e2e", data)
    try:
        return RunnerConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid config {path}: {e}") from e
