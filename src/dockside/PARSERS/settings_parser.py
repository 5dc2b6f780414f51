# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Loads DockerSettings from a YAML file, a .env file and the process environment.
"""
import os
from typing import Any, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values

from ..MODELS.settings import DockerSettings


class SettingsParser:
    """
    Merges settings sources, later ones winning:
    defaults < YAML file < .env file < process environment.
    """
    ENV_PREFIX = "DOCKSIDE_"

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        """
        Initializes the parser.

        :param environ: Environment to read overrides from. Defaults to os.environ.
        """
        self.environ = dict(os.environ) if environ is None else dict(environ)

    def parse(self, config_path: Optional[str] = None, env_file: Optional[str] = ".env") -> DockerSettings:
        """
        Builds settings from all available sources.

        :param config_path: Optional YAML settings file. It must exist if given.
        :param env_file: Optional .env file, skipped when missing.
        :return: Validated settings.
        """
        values: Dict[str, Any] = {}

        if config_path:
            with open(config_path, 'r') as f:
                values.update(self.parse_from_string(f.read()))

        if env_file and os.path.exists(env_file):
            values.update(self.from_environment(dotenv_values(env_file)))

        values.update(self.from_environment(self.environ))
        return DockerSettings(**values)

    @staticmethod
    def parse_from_string(content: str) -> Dict[str, Any]:
        """
        Parses YAML settings content into a flat dictionary.
        """
        data = yaml.safe_load(content)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError("Settings file must contain a mapping at the top level")
        return data

    @classmethod
    def from_environment(cls, env: Mapping[str, Optional[str]]) -> Dict[str, Any]:
        """
        Picks DOCKSIDE_* keys (and the standard DOCKER_HOST) out of an environment.
        """
        values: Dict[str, Any] = {}

        docker_host = env.get("DOCKER_HOST")
        if docker_host:
            values["endpoint"] = docker_host

        for name in DockerSettings.model_fields:
            value = env.get(f"{cls.ENV_PREFIX}{name.upper()}")
            if value is not None and value != "":
                values[name] = value

        return values
