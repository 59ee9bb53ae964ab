from abc import ABC, abstractmethod
from typing import Any, Dict, List

from pydantic import ValidationError

from uiflow.errors import ConfigError
from uiflow.models.dsl import SuiteDefinition


def expand_steps(raw_steps: List[Any]) -> List[Dict[str, Any]]:
    """
    Flattens `{repeat: N, steps: [...]}` blocks into N copies of their steps.
    Blocks may nest.
    """
    steps = []
    for item in raw_steps or []:
        if isinstance(item, dict) and "repeat" in item:
            count = item["repeat"]
            if not isinstance(count, int) or count < 0:
                raise ConfigError(f"repeat must be a non-negative integer, got {count!r}")
            inner = expand_steps(item.get("steps", []))
            for _ in range(count):
                steps.extend(dict(s) for s in inner)
        else:
            steps.append(item)
    return steps


def build_suite(data: Any, name: str, source: str) -> SuiteDefinition:
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: a scenario file must contain a mapping")
    scenarios = []
    for scenario in data.get("scenarios", []) or []:
        if not isinstance(scenario, dict):
            raise ConfigError(f"{source}: every scenario must be a mapping")
        scenario = dict(scenario)
        scenario["steps"] = expand_steps(scenario.get("steps", []))
        scenarios.append(scenario)
    try:
        return SuiteDefinition(
            name=data.get("name") or name,
            source=source,
            session=data.get("session") or {},
            scenarios=scenarios,
        )
    except ValidationError as e:
        raise ConfigError(f"{source}: invalid scenario file: {e}") from e


class ScenarioProvider(ABC):
    @abstractmethod
    def get_suites(self) -> List[SuiteDefinition]:
        """
        Returns the suites to run.
        Each suite holds a session block and the scenarios that share that session.
        """
        pass
