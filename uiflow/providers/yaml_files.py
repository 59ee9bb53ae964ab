import glob
import logging
import os
from typing import List

import yaml

from uiflow.errors import ConfigError
from uiflow.models.dsl import SuiteDefinition
from uiflow.providers.base import ScenarioProvider, build_suite

LOGGER = logging.getLogger("uiflow.providers")


class YamlFileProvider(ScenarioProvider):
    """Loads one suite per YAML file matching a glob pattern (e.g. 'scenarios/**/*.yaml')."""

    def __init__(self, pattern: str):
        self.pattern = pattern

    def files(self) -> List[str]:
        if os.path.isdir(self.pattern):
            pattern = os.path.join(self.pattern, "**", "*.y*ml")
        else:
            pattern = self.pattern
        matches = glob.glob(pattern, recursive=True)
        return sorted(m for m in matches if os.path.splitext(m)[1].lower() in ('.yaml', '.yml'))

    def get_suites(self) -> List[SuiteDefinition]:
        files = self.files()
        LOGGER.info("Loading %d scenario files matching %s", len(files), self.pattern)
        suites = []
        for file_path in files:
            name = os.path.splitext(os.path.basename(file_path))[0]
            try:
                with open(file_path, 'r', encoding='utf-8') as f:
                    data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Error reading YAML {file_path}: {e}") from e
            suites.append(build_suite(data, name, file_path))
        return suites
