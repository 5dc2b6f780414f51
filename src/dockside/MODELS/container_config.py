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
Models for one-shot container runs: the caller's configuration, the options
sent to the daemon, and the captured result.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

# host path -> container path
BindsMap = Dict[str, str]


class ContainerConfig(BaseModel):
    """
    Per-run configuration supplied by the caller.
    """
    working_directory: Optional[str] = None
    binds: Optional[BindsMap] = None
    network_mode: Optional[str] = None


class RunOptions(BaseModel):
    """
    Create options handed to the daemon transport for a single run.
    """
    model_config = ConfigDict(frozen=True)

    tty: bool = False
    working_dir: Optional[str] = None
    # [""] clears the image entrypoint so the command runs directly
    entrypoint: List[str] = Field(default_factory=lambda: [""])
    auto_remove: bool = True
    binds: List[str] = []
    network_mode: Optional[str] = None


class ProcessResult(BaseModel):
    """
    Exit status and captured output of a finished container.
    """
    model_config = ConfigDict(frozen=True)

    status_code: int
    stdout: bytes = b""
    stderr: bytes = b""
