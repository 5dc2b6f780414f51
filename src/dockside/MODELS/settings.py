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
Settings for reaching the Docker daemon and the registry.
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict


class DockerSettings(BaseModel):
    """
    Endpoints and limits used by DockerSandbox.

    ``endpoint`` left as None means the platform default is resolved at
    creation time (see RUNTIME.probe).
    """
    model_config = ConfigDict(frozen=True, extra="forbid")

    executable: str = "docker"
    endpoint: Optional[str] = None

    hub_url: str = "https://registry.hub.docker.com"
    registry_url: str = "https://registry-1.docker.io"
    auth_url: str = "https://auth.docker.io"
    auth_service: str = "registry.docker.io"
    manifest_media_type: str = "application/vnd.docker.distribution.manifest.v2+json"

    # Seconds; None blocks until the daemon or registry answers
    timeout: Optional[float] = None

    log_level: str = "INFO"
