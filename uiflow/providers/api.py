import json
import logging
import urllib.request
from typing import List
from urllib.error import URLError

from uiflow.errors import ConfigError
from uiflow.models.dsl import SuiteDefinition
from uiflow.providers.base import ScenarioProvider, build_suite

LOGGER = logging.getLogger("uiflow.providers")


class APIProvider(ScenarioProvider):
    """Fetches suites from an HTTP endpoint returning a JSON list of scenario-file documents."""

    def __init__(self, api_url: str, timeout: float = 30):
        self.api_url = api_url
        self.timeout = timeout

    def get_suites(self) -> List[SuiteDefinition]:
        LOGGER.info("Fetching suites from %s", self.api_url)
        try:
            with urllib.request.urlopen(self.api_url, timeout=self.timeout) as response:
                if response.status != 200:
                    raise ConfigError(f"HTTP Error {response.status} from {self.api_url}")
                data = json.loads(response.read().decode('utf-8'))
        except (URLError, ValueError) as e:
            raise ConfigError(f"Error fetching suites from {self.api_url}: {e}") from e

        if isinstance(data, dict):
            data = [data]
        if not isinstance(data, list):
            raise ConfigError(f"{self.api_url} must return a list of suites")
        return [build_suite(item, f"suite_{idx + 1}", self.api_url) for idx, item in enumerate(data)]
