import pytest

from uiflow import config as config_module
from uiflow import main as main_module

from fakes import FakeClock, FakeDocument, FakeElement

SUITE = """
name: smoke
session:
  base_url: http://localhost:3000/
  username: jamal
  password: password
  marker: {css: button, text: N1}
scenarios:
  - name: open node
    steps:
      - action: click
        locator: {css: button, text: N1}
"""


class FakeBrowser:
    instances = []

    def __init__(self, config):
        self.config = config
        self.documents = []
        self.closed = False
        FakeBrowser.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True

    def open_document(self):
        document = FakeDocument(FakeClock(), [FakeElement("button", text="N1")])
        self.documents.append(document)
        return document


@pytest.fixture(autouse=True)
def fake_browser(monkeypatch):
    FakeBrowser.instances = []
    monkeypatch.setattr(main_module, "PlaywrightBrowser", FakeBrowser)
    monkeypatch.setattr(main_module, "install_cancel_handler", lambda event: None)
    monkeypatch.setattr(config_module, "UIFLOW_USERNAME", None)
    monkeypatch.setattr(config_module, "UIFLOW_PASSWORD", None)


def test_run_passing_scenarios_exits_zero(tmp_path, capsys):
    (tmp_path / "smoke.yaml").write_text(SUITE, encoding="utf-8")
    assert main_module.main(["run", str(tmp_path / "*.yaml")]) == 0
    out = capsys.readouterr().out
    assert "PASS open node" in out
    assert FakeBrowser.instances[0].closed


def test_run_failing_scenario_exits_non_zero(tmp_path, capsys):
    failing = SUITE + "      - {action: click, locator: {testid: nope}, timeout_ms: 1}\n"
    (tmp_path / "smoke.yaml").write_text(failing, encoding="utf-8")
    assert main_module.main(["run", str(tmp_path)]) == 1
    assert "FAIL open node" in capsys.readouterr().out


def test_run_without_matching_files(tmp_path, capsys):
    assert main_module.main(["run", str(tmp_path / "*.yaml")]) == main_module.EXIT_NO_SCENARIOS
    assert "No scenario files" in capsys.readouterr().out
    assert FakeBrowser.instances == []


def test_run_with_config_file(tmp_path):
    (tmp_path / "smoke.yaml").write_text(SUITE, encoding="utf-8")
    (tmp_path / "uiflow.yml.cfg").write_text("e2e:\n  viewportWidth: 1920\n", encoding="utf-8")
    assert main_module.main(["run", str(tmp_path / "*.yaml"), "--config", str(tmp_path / "uiflow.yml.cfg"),
                             "--headed"]) == 0
    browser = FakeBrowser.instances[0]
    assert browser.config.viewport_width == 1920
    assert browser.config.headless is False


def test_bad_config_file_exits_with_error(tmp_path):
    (tmp_path / "smoke.yaml").write_text(SUITE, encoding="utf-8")
    assert main_module.main(["run", str(tmp_path / "*.yaml"), "--config", str(tmp_path / "missing.yaml")]) == 2


def test_no_command_prints_help(capsys):
    assert main_module.main([]) == 2
    assert "run" in capsys.readouterr().out


def test_make_provider_picks_api_for_urls():
    assert isinstance(main_module.make_provider("https://cases.test/suites"), main_module.APIProvider)
    assert isinstance(main_module.make_provider("scenarios/*.yaml"), main_module.YamlFileProvider)


def test_verbose_flag_after_run_command(tmp_path):
    (tmp_path / "smoke.yaml").write_text(SUITE, encoding="utf-8")
    args = main_module.build_parser().parse_args(["run", str(tmp_path), "-vv", "--headed"])
    assert args.verbose == 2
    assert args.headed
    assert main_module.main(["run", str(tmp_path), "-v"]) == 0
