import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from pydantic import ValidationError

from uiflow.config import SESSION_END, SESSION_START, RunnerConfig
from uiflow.driver.document import Document
from uiflow.driver.driver import InteractionDriver
from uiflow.driver.polling import Clock
from uiflow.driver.session import Session
from uiflow.errors import AuthenticationError, ConfigError, HookError
from uiflow.models.dsl import SessionConfig, SuiteDefinition
from uiflow.models.outcome import ScenarioResult
from uiflow.providers.base import ScenarioProvider

LOGGER = logging.getLogger("uiflow.runner")


@dataclass
class SuiteReport:
    name: str
    source: Optional[str] = None
    results: List[ScenarioResult] = field(default_factory=list)
    teardown_error: Optional[HookError] = None

    @property
    def passed(self) -> bool:
        return self.teardown_error is None and all(r.passed for r in self.results)


class SuiteRunner:
    """Runs each suite in its own Session: login, hooks, scenarios, teardown."""

    def __init__(self, config: RunnerConfig, document_factory: Callable[[], Document],
                 clock: Optional[Clock] = None):
        self.config = config
        self.driver = InteractionDriver(config, document_factory, clock)

    def session_config(self, suite: SuiteDefinition) -> SessionConfig:
        data = {**self.config.session_defaults(), **suite.session, **self.config.session_overrides()}
        try:
            return SessionConfig(**data)
        except ValidationError as e:
            raise ConfigError(f"Suite '{suite.name}': invalid session block: {e}") from e

    def _fire(self, event: str, session: Session) -> None:
        for hook in self.config.setup_hooks:
            LOGGER.debug("Calling %s hook %s", event, getattr(hook, "__name__", hook))
            try:
                hook(event, session)
            except Exception as e:
                raise HookError(event, hook, e) from e

    def run_suite(self, suite: SuiteDefinition, cancel_event: Optional[threading.Event] = None) -> SuiteReport:
        report = SuiteReport(name=suite.name, source=suite.source)
        session_config = self.session_config(suite)
        LOGGER.info("Suite '%s': %d scenarios", suite.name, len(suite.scenarios))

        try:
            session = self.driver.authenticate(session_config)
        except AuthenticationError as e:
            LOGGER.error("Suite '%s' aborted: %s", suite.name, e)
            report.results = [ScenarioResult(name=s.name, aborted=e) for s in suite.scenarios]
            return report

        with session:
            try:
                self._fire(SESSION_START, session)
            except HookError as e:
                LOGGER.error("Suite '%s' aborted: %s", suite.name, e)
                report.results = [ScenarioResult(name=s.name, aborted=e) for s in suite.scenarios]
                return report

            try:
                for scenario in suite.scenarios:
                    if cancel_event is not None and cancel_event.is_set():
                        report.results.append(ScenarioResult(name=scenario.name, cancelled=True))
                        continue
                    report.results.append(self.driver.run(session, scenario, cancel_event))
            finally:
                try:
                    self._fire(SESSION_END, session)
                except HookError as e:
                    LOGGER.error("Suite '%s' teardown failed: %s", suite.name, e)
                    report.teardown_error = e
        return report

    def run(self, provider: ScenarioProvider, cancel_event: Optional[threading.Event] = None) -> List[SuiteReport]:
        return [self.run_suite(suite, cancel_event) for suite in provider.get_suites()]


def exit_code(reports: List[SuiteReport]) -> int:
    return 0 if reports and all(r.passed for r in reports) else 1


def format_report(reports: List[SuiteReport]) -> str:
    lines = []
    total = passed = 0
    for report in reports:
        lines.append(f"{report.name} ({report.source})" if report.source else report.name)
        for result in report.results:
            total += 1
            if result.passed:
                passed += 1
                lines.append(f"  PASS {result.name} ({len(result.outcomes)} steps)")
            elif result.aborted is not None:
                lines.append(f"  ABORTED {result.name}: {result.aborted}")
            elif result.cancelled:
                lines.append(f"  CANCELLED {result.name} after {len(result.outcomes)} steps")
            else:
                failure = result.first_failure
                lines.append(f"  FAIL {result.name}")
                lines.append(f"       {failure.summary()}")
        if report.teardown_error is not None:
            lines.append(f"  TEARDOWN FAILED: {report.teardown_error}")
    lines.append(f"{passed}/{total} scenarios passed")
    return "\n".join(lines)
