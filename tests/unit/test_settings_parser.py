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
Unit tests for settings loading.
"""
import pytest
from pydantic import ValidationError

from dockside.MODELS.settings import DockerSettings
from dockside.PARSERS.settings_parser import SettingsParser


def test_defaults(tmp_path):
    settings = SettingsParser(environ={}).parse(env_file=str(tmp_path / ".env"))
    assert settings == DockerSettings()
    assert settings.endpoint is None
    assert settings.timeout is None
    assert settings.registry_url == "https://registry-1.docker.io"


def test_parse_from_string():
    content = """
    endpoint: unix:///run/user/1000/docker.sock
    timeout: 30
    """
    values = SettingsParser.parse_from_string(content)
    assert values == {"endpoint": "unix:///run/user/1000/docker.sock", "timeout": 30}


def test_parse_from_string_empty():
    assert SettingsParser.parse_from_string("") == {}


def test_parse_from_string_not_a_mapping():
    with pytest.raises(ValueError):
        SettingsParser.parse_from_string("- a\n- b\n")


def test_sources_override_in_order(tmp_path):
    config = tmp_path / "dockside.yml"
    config.write_text("endpoint: unix:///yaml.sock\ntimeout: 10\nlog_level: DEBUG\n")
    env_file = tmp_path / ".env"
    env_file.write_text("DOCKSIDE_TIMEOUT=20\nDOCKSIDE_HUB_URL=https://hub.example.com\n")
    environ = {"DOCKSIDE_HUB_URL": "https://hub.internal"}

    settings = SettingsParser(environ=environ).parse(str(config), env_file=str(env_file))

    assert settings.endpoint == "unix:///yaml.sock"
    assert settings.log_level == "DEBUG"
    assert settings.timeout == 20.0
    assert settings.hub_url == "https://hub.internal"


def test_docker_host(tmp_path):
    parser = SettingsParser(environ={"DOCKER_HOST": "tcp://10.0.0.2:2375"})
    settings = parser.parse(env_file=str(tmp_path / ".env"))
    assert settings.endpoint == "tcp://10.0.0.2:2375"


def test_prefixed_endpoint_wins_over_docker_host():
    values = SettingsParser.from_environment({
        "DOCKER_HOST": "tcp://10.0.0.2:2375",
        "DOCKSIDE_ENDPOINT": "unix:///custom.sock",
    })
    assert values["endpoint"] == "unix:///custom.sock"


def test_empty_values_ignored():
    assert SettingsParser.from_environment({"DOCKSIDE_TIMEOUT": "", "DOCKER_HOST": ""}) == {}


def test_unknown_yaml_key_rejected(tmp_path):
    config = tmp_path / "dockside.yml"
    config.write_text("socket: /var/run/docker.sock\n")
    with pytest.raises(ValidationError):
        SettingsParser(environ={}).parse(str(config), env_file=None)
