import os.path

import pytest

from uiflow import config as config_module
from uiflow.config import RunnerConfig, load_runner_config, resolve_hook
from uiflow.errors import ConfigError


def test_runner_config_accepts_camel_case_keys():
    config = RunnerConfig(viewportWidth=1920, viewportHeight=1080, baseUrl="http://localhost:3004",
                          defaultTimeoutMs=7000)
    assert config.viewport_width == 1920
    assert config.viewport_height == 1080
    assert config.base_url == "http://localhost:3004/"
    assert config.default_timeout_ms == 7000


def test_runner_config_defaults():
    config = RunnerConfig()
    assert (config.viewport_width, config.viewport_height) == (1280, 720)
    assert config.setup_hooks == []
    assert config.base_url.endswith("/")


def test_load_runner_config_from_yaml(tmp_path):
    path = tmp_path / "uiflow.yaml"
    path.write_text(
        "e2e:\n"
        "  viewportWidth: 1280\n"
        "  viewportHeight: 720\n"
        "  pollIntervalMs: 50\n"
        "  setupHooks: ['os.path:join']\n",
        encoding="utf-8",
    )
    config = load_runner_config(str(path))
    assert config.poll_interval_ms == 50
    assert config.setup_hooks == [os.path.join]


def test_load_runner_config_without_path():
    assert load_runner_config(None) == RunnerConfig()


@pytest.mark.parametrize("content", ["viewportWidth: -5\n", "unknownOption: 1\n", "- a\n- b\n", "a: [\n"])
def test_load_runner_config_rejects_bad_files(tmp_path, content):
    path = tmp_path / "bad.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigError):
        load_runner_config(str(path))


def test_load_runner_config_missing_file(tmp_path):
    with pytest.raises(ConfigError):
        load_runner_config(str(tmp_path / "nope.yaml"))


@pytest.mark.parametrize("path", ["os.path", "os.path:", "no_such_module_xyz:hook", "os.path:sep"])
def test_resolve_hook_errors(path):
    with pytest.raises(ConfigError):
        resolve_hook(path)


def test_callable_hooks_are_kept():
    def hook(event, session):
        pass
    assert RunnerConfig(setupHooks=[hook]).setup_hooks == [hook]


def test_environment_credentials_override(monkeypatch):
    monkeypatch.setattr(config_module, "UIFLOW_USERNAME", "ci-user")
    monkeypatch.setattr(config_module, "UIFLOW_PASSWORD", "secret")
    config = RunnerConfig(baseUrl="http://localhost:3000/")
    assert config.session_overrides() == {"username": "ci-user", "password": "secret"}
    assert config.session_defaults()["base_url"] == "http://localhost:3000/"


def test_no_environment_credentials(monkeypatch):
    monkeypatch.setattr(config_module, "UIFLOW_USERNAME", None)
    monkeypatch.setattr(config_module, "UIFLOW_PASSWORD", None)
    assert RunnerConfig().session_overrides() == {}
