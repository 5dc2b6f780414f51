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
Validation and serialization of bind mounts.
"""
import os
from typing import List, Optional

from ..errors import BindDoesntExistInHostError
from ..MODELS.container_config import BindsMap


def validate_binds(binds: Optional[BindsMap]) -> None:
    """
    Check that every host path of a binds map exists, in mapping order.

    :param binds: host path -> container path, or None.
    :raises BindDoesntExistInHostError: For the first missing host path.
    """
    if not binds:
        return

    for host_path in binds:
        if not os.path.exists(host_path):
            raise BindDoesntExistInHostError(host_path)


def binds_to_list(binds: Optional[BindsMap]) -> List[str]:
    """
    Serialize a binds map to the daemon's 'host:container' strings.
    """
    if not binds:
        return []
    return [f"{host}:{container}" for host, container in binds.items()]
