import threading

import pytest

from uiflow import config as config_module
from uiflow.config import RunnerConfig
from uiflow.errors import AuthenticationError, ConfigError, HookError
from uiflow.models.dsl import SuiteDefinition
from uiflow.providers.base import ScenarioProvider
from uiflow.runner import SuiteReport, SuiteRunner, exit_code, format_report

from fakes import login_document


@pytest.fixture(autouse=True)
def no_env_credentials(monkeypatch):
    monkeypatch.setattr(config_module, "UIFLOW_USERNAME", None)
    monkeypatch.setattr(config_module, "UIFLOW_PASSWORD", None)


def make_suite(password="password", scenarios=None):
    return SuiteDefinition(
        name="Modification Test",
        source="scenarios/generator-modification.yaml",
        session={"username": "jamal", "password": password, "marker": {"css": "button", "text": "N1"},
                 "login_timeout_ms": 2000},
        scenarios=scenarios or [
            {"name": "open node", "steps": [{"action": "click", "locator": {"css": "button", "text": "N1"}}]},
            {"name": "missing", "steps": [{"action": "click", "locator": {"testid": "nope"}, "timeout_ms": 500}]},
        ],
    )


class ListProvider(ScenarioProvider):
    def __init__(self, suites):
        self.suites = suites

    def get_suites(self):
        return self.suites


@pytest.fixture
def events():
    return []


@pytest.fixture
def runner(clock, events):
    def hook(event, session):
        events.append((event, session.is_open))
    config = RunnerConfig(baseUrl="http://localhost:3004", defaultTimeoutMs=1000, setupHooks=[hook])
    documents = []

    def factory():
        documents.append(login_document(clock))
        return documents[-1]
    runner = SuiteRunner(config, factory, clock)
    runner.documents = documents
    return runner


def test_run_suite_reports_each_scenario(runner, events):
    report = runner.run_suite(make_suite())
    assert [r.name for r in report.results] == ["open node", "missing"]
    assert report.results[0].passed
    assert not report.results[1].passed
    assert not report.passed
    assert events == [("session_start", True), ("session_end", True)]
    assert runner.documents[0].closed
    assert runner.documents[0].urls == ["http://localhost:3004/"]


def test_authentication_failure_aborts_every_scenario(runner, events):
    report = runner.run_suite(make_suite(password="wrong"))
    assert len(report.results) == 2
    assert all(isinstance(r.aborted, AuthenticationError) for r in report.results)
    assert all(r.outcomes == [] for r in report.results)
    assert events == []
    assert exit_code([report]) == 1
    assert "ABORTED open node" in format_report([report])


def test_each_suite_gets_its_own_session(runner):
    reports = runner.run(ListProvider([make_suite(), make_suite()]))
    assert len(reports) == 2
    assert len(runner.documents) == 2
    assert all(d.closed for d in runner.documents)


def test_cancelled_run_marks_remaining_scenarios(runner):
    cancel = threading.Event()
    cancel.set()
    report = runner.run_suite(make_suite(), cancel_event=cancel)
    assert all(r.cancelled for r in report.results)
    assert "CANCELLED" in format_report([report])


def test_invalid_session_block(runner):
    suite = make_suite()
    suite.session.pop("marker")
    with pytest.raises(ConfigError):
        runner.run_suite(suite)


def test_start_hook_failure_aborts_suite_and_tears_down(clock):
    def hook(event, session):
        if event == "session_start":
            raise RuntimeError("seed data unavailable")
    documents = []

    def factory():
        documents.append(login_document(clock))
        return documents[-1]
    runner = SuiteRunner(RunnerConfig(setupHooks=[hook]), factory, clock)
    report = runner.run_suite(make_suite())
    assert [r.name for r in report.results] == ["open node", "missing"]
    assert all(isinstance(r.aborted, HookError) for r in report.results)
    assert report.results[0].aborted.event == "session_start"
    assert "seed data unavailable" in format_report([report])
    assert not report.passed
    assert documents[0].closed
    # only the login form was touched
    assert [a[0] for a in documents[0].actions] == ["fill", "fill", "click"]


def test_end_hook_failure_fails_report(clock):
    def hook(event, session):
        if event == "session_end":
            raise RuntimeError("cleanup failed")
    documents = []

    def factory():
        documents.append(login_document(clock))
        return documents[-1]
    runner = SuiteRunner(RunnerConfig(setupHooks=[hook]), factory, clock)
    report = runner.run_suite(make_suite(scenarios=[
        {"name": "open node", "steps": [{"action": "click", "locator": {"css": "button", "text": "N1"}}]}]))
    assert report.results[0].passed
    assert isinstance(report.teardown_error, HookError)
    assert not report.passed
    assert exit_code([report]) == 1
    assert "TEARDOWN FAILED" in format_report([report])
    assert documents[0].closed


def test_environment_credentials_win(runner, monkeypatch):
    monkeypatch.setattr(config_module, "UIFLOW_PASSWORD", "wrong")
    config = runner.session_config(make_suite())
    assert config.password.get_secret_value() == "wrong"
    assert config.base_url == "http://localhost:3004/"


def test_exit_code_and_report():
    passing = SuiteReport(name="ok", results=[])
    assert exit_code([passing]) == 0
    assert exit_code([]) == 1
    assert format_report([passing]).endswith("0/0 scenarios passed")


def test_report_shows_first_failure(runner):
    text = format_report([runner.run_suite(make_suite())])
    assert "PASS open node" in text
    assert "FAIL missing" in text
    assert "testid=nope" in text
    assert "1/2 scenarios passed" in text
