from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from uiflow.errors import ScenarioFailedError
from uiflow.models.dsl import Step
from uiflow.models.locator import Locator


class StepState(str, Enum):
    PENDING = "pending"
    POLLING = "polling"
    RESOLVED = "resolved"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


TERMINAL_STATES = {StepState.SUCCEEDED, StepState.FAILED, StepState.TIMED_OUT}

# Allowed transitions of a single step execution
TRANSITIONS = {
    StepState.PENDING: {StepState.POLLING, StepState.EXECUTING},
    StepState.POLLING: {StepState.RESOLVED, StepState.TIMED_OUT, StepState.SUCCEEDED},
    StepState.RESOLVED: {StepState.EXECUTING, StepState.SUCCEEDED},
    # select_menu_item polls a second time for the sub-entry
    StepState.EXECUTING: {StepState.SUCCEEDED, StepState.FAILED, StepState.POLLING},
}


@dataclass
class Outcome:
    index: int
    step: Step
    state: StepState = StepState.PENDING
    trace: List[StepState] = field(default_factory=lambda: [StepState.PENDING])
    elapsed_ms: float = 0.0
    duration_ms: float = 0.0
    error: Optional[Exception] = None

    def advance(self, state: StepState) -> None:
        if state not in TRANSITIONS.get(self.state, set()):
            raise RuntimeError(f"Illegal step transition {self.state.value} -> {state.value}")
        self.state = state
        self.trace.append(state)

    @property
    def locator(self) -> Optional[Locator]:
        return self.step.locator

    @property
    def succeeded(self) -> bool:
        return self.state == StepState.SUCCEEDED

    @property
    def done(self) -> bool:
        return self.state in TERMINAL_STATES

    def summary(self) -> str:
        text = f"step {self.index + 1} [{self.step.label()}] {self.state.value}"
        if self.error is not None:
            text += f" after waiting {self.elapsed_ms:.0f}ms: {self.error}"
        return text


@dataclass
class ScenarioResult:
    name: str
    outcomes: List[Outcome] = field(default_factory=list)
    cancelled: bool = False
    aborted: Optional[Exception] = None

    @property
    def first_failure(self) -> Optional[Outcome]:
        for outcome in self.outcomes:
            if not outcome.succeeded and not outcome.step.best_effort:
                return outcome
        return None

    @property
    def passed(self) -> bool:
        return self.aborted is None and not self.cancelled and self.first_failure is None

    def raise_for_failure(self) -> None:
        if self.aborted is not None:
            raise self.aborted
        failure = self.first_failure
        if failure is not None:
            raise ScenarioFailedError(self.name, failure) from failure.error
