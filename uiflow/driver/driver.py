import logging
import threading
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from uiflow.config import RunnerConfig
from uiflow.driver.auth import AuthManager
from uiflow.driver.document import Document, ElementHandle
from uiflow.driver.polling import Clock, poll
from uiflow.driver.session import Session
from uiflow.errors import ActionRejectedError, ElementNotFoundError, WaitTimeoutError
from uiflow.models.dsl import CONDITION_ACTIONS, Scenario, SessionConfig, Step
from uiflow.models.locator import Locator
from uiflow.models.outcome import Outcome, ScenarioResult, StepState

LOGGER = logging.getLogger("uiflow.driver")

# Steps that only need the element to exist
_WAIT_ACTIONS = {"wait_for", "assert_visible"}


@dataclass
class Resolution:
    element: ElementHandle
    elapsed_ms: float


def submenu_locator(menu: Locator, entry: str) -> Locator:
    """Locator of a sub-menu entry, built like the menu entry it opens from."""
    if menu.name is not None:
        return menu.model_copy(update={"name": entry, "index": 0})
    return menu.model_copy(update={"text": entry, "index": 0})


class InteractionDriver:
    """
    Turns Steps into Outcomes against a render-delayed document.

    Element lookups poll at config.poll_interval_ms until they resolve or the
    step timeout elapses. Actions on a resolved element are attempted once.
    """

    def __init__(self, config: Optional[RunnerConfig] = None,
                 document_factory: Optional[Callable[[], Document]] = None,
                 clock: Optional[Clock] = None):
        self.config = config or RunnerConfig()
        self.document_factory = document_factory
        self.clock = clock or Clock()
        self.auth = AuthManager(self, state_file=self.config.state_file)

    def authenticate(self, session_config: SessionConfig) -> Session:
        if self.document_factory is None:
            raise RuntimeError("InteractionDriver needs a document_factory to open sessions")
        return self.auth.login(session_config, self.document_factory)

    def find_all(self, document: Document, locator: Locator) -> List[ElementHandle]:
        matches = document.query(locator)
        if locator.visible:
            matches = [m for m in matches if m.is_visible()]
        if locator.enabled:
            matches = [m for m in matches if m.is_enabled()]
        return matches

    def find(self, document: Document, locator: Locator) -> Optional[ElementHandle]:
        """Single non-waiting lookup."""
        matches = self.find_all(document, locator)
        if len(matches) > locator.index:
            return matches[locator.index]
        return None

    def resolve_in(self, document: Document, locator: Locator, timeout_ms: float) -> Resolution:
        try:
            result = poll(lambda: self.find(document, locator), timeout_ms,
                          self.config.poll_interval_ms, self.clock, description=locator.describe())
        except WaitTimeoutError as e:
            raise ElementNotFoundError(locator, e.elapsed_ms) from e
        return Resolution(result.value, result.elapsed_ms)

    def resolve(self, session: Session, locator: Locator, timeout_ms: Optional[float] = None) -> Resolution:
        return self.resolve_in(session.document, locator, self._timeout(timeout_ms))

    def locate(self, session: Session, locator: Locator, timeout_ms: Optional[float] = None) -> ElementHandle:
        return self.resolve(session, locator, timeout_ms).element

    def wait_for_condition(self, session: Session, predicate: Callable[[Document], object],
                           timeout_ms: Optional[float] = None, description: str = "condition",
                           raise_on_timeout: bool = True) -> bool:
        """
        Polls predicate(document) until it is truthy.
        Raises WaitTimeoutError on timeout, or returns False if raise_on_timeout is off.
        """
        document = session.document
        try:
            poll(lambda: predicate(document), self._timeout(timeout_ms),
                 self.config.poll_interval_ms, self.clock, description=description)
        except WaitTimeoutError:
            if raise_on_timeout:
                raise
            return False
        return True

    def act(self, session: Session, step: Step, index: int = 0) -> Outcome:
        document = session.document
        outcome = Outcome(index=index, step=step)
        timeout = self._timeout(step.timeout_ms)
        started = self.clock.now_ms()
        try:
            if step.action == "goto":
                outcome.advance(StepState.EXECUTING)
                document.goto(session.absolute_url(step.value))
            elif step.action in CONDITION_ACTIONS:
                outcome.advance(StepState.POLLING)
                result = poll(self._condition_for(document, step), timeout,
                              self.config.poll_interval_ms, self.clock, description=step.label())
                outcome.elapsed_ms += result.elapsed_ms
            elif step.action == "assert_text":
                outcome.advance(StepState.POLLING)
                result = poll(lambda: self._element_with_text(document, step.locator, step.value), timeout,
                              self.config.poll_interval_ms, self.clock, description=step.label())
                outcome.elapsed_ms += result.elapsed_ms
                outcome.advance(StepState.RESOLVED)
            else:
                element = self._resolve_step(document, outcome, step.locator, timeout)
                if step.action not in _WAIT_ACTIONS:
                    outcome.advance(StepState.EXECUTING)
                    self._perform(document, outcome, element, timeout)
            outcome.advance(StepState.SUCCEEDED)
        except (ElementNotFoundError, WaitTimeoutError) as e:
            outcome.elapsed_ms += e.elapsed_ms
            outcome.error = e
            outcome.advance(StepState.TIMED_OUT)
        except ActionRejectedError as e:
            if e.locator is None:
                e.locator = step.locator
            outcome.error = e
            outcome.advance(StepState.FAILED)
        outcome.duration_ms = self.clock.now_ms() - started
        return outcome

    def run_scenario(self, session: Session, steps: Iterable[Step], name: str = "scenario",
                     cancel_event: Optional[threading.Event] = None) -> ScenarioResult:
        """
        Runs steps strictly in order and stops at the first failure that is not best-effort.
        Cancellation is only honoured between steps.
        """
        result = ScenarioResult(name=name)
        for index, step in enumerate(steps):
            if cancel_event is not None and cancel_event.is_set():
                LOGGER.warning("Scenario '%s' cancelled before step %d", name, index + 1)
                result.cancelled = True
                break
            outcome = self.act(session, step, index)
            result.outcomes.append(outcome)
            if outcome.succeeded:
                LOGGER.info("  ok   %s (%.0fms)", step.label(), outcome.duration_ms)
                continue
            if step.best_effort:
                LOGGER.info("  skip %s: %s", step.label(), outcome.error)
                continue
            LOGGER.error("  FAIL %s", outcome.summary())
            break
        return result

    def run(self, session: Session, scenario: Scenario,
            cancel_event: Optional[threading.Event] = None) -> ScenarioResult:
        LOGGER.info("Running scenario '%s'", scenario.name)
        return self.run_scenario(session, scenario.entry_steps(), name=scenario.name, cancel_event=cancel_event)

    def _timeout(self, timeout_ms: Optional[float]) -> float:
        return timeout_ms if timeout_ms is not None else self.config.default_timeout_ms

    def _resolve_step(self, document: Document, outcome: Outcome, locator: Locator, timeout: float) -> ElementHandle:
        outcome.advance(StepState.POLLING)
        resolution = self.resolve_in(document, locator, timeout)
        outcome.elapsed_ms += resolution.elapsed_ms
        outcome.advance(StepState.RESOLVED)
        return resolution.element

    def _element_with_text(self, document: Document, locator: Locator, expected: str) -> Optional[ElementHandle]:
        element = self.find(document, locator)
        if element is None:
            return None
        try:
            return element if expected in element.text() else None
        except ActionRejectedError:
            # detached between query and read; poll again
            return None

    def _condition_for(self, document: Document, step: Step) -> Callable[[], bool]:
        if step.action == "assert_hidden":
            return lambda: self.find(document, step.locator) is None
        if step.action == "wait_for_url":
            return lambda: step.value in document.current_url()
        if step.action == "wait_for_requests":
            expected = int(step.value)
            return lambda: document.request_count >= expected
        raise ValueError(f"Unknown condition action '{step.action}'")

    def _perform(self, document: Document, outcome: Outcome, element: ElementHandle, timeout: float) -> None:
        step = outcome.step
        action = step.action
        if action == "click":
            targets = [element]
            if step.args.get("multiple"):
                targets = self.find_all(document, step.locator) or [element]
            for target in targets:
                target.click(force=step.force)
        elif action == "right_click":
            element.click(button="right", force=step.force)
        elif action == "double_click":
            element.click(click_count=2, force=step.force)
        elif action == "hover":
            element.hover(force=step.force)
        elif action == "type":
            element.type(step.value)
        elif action == "fill":
            element.fill(step.value)
        elif action == "clear":
            element.fill("")
        elif action == "press":
            element.press(step.value)
        elif action == "select":
            element.select_option(step.value)
        elif action == "check":
            element.check(force=step.force)
        elif action == "upload_file":
            element.set_input_files(step.value)
        elif action == "select_menu_item":
            element.hover(force=step.force)
            entry = self._resolve_step(document, outcome, submenu_locator(step.locator, step.value), timeout)
            outcome.advance(StepState.EXECUTING)
            entry.click(force=step.force)
        else:
            raise ValueError(f"Unknown action '{action}'")
