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
Host capability checks: is the runtime installed, where is its control
endpoint, and can that endpoint be reached.
"""
import os
import shutil
import socket
import sys
from typing import Callable, Dict, Optional
from urllib.parse import urlparse

from ..errors import UnsupportedPlatformError

DOCKER_SOCKET_PATH = "/var/run/docker.sock"


def _unix_socket_endpoint() -> str:
    return f"unix://{DOCKER_SOCKET_PATH}"


# Platform prefix -> default endpoint strategy. Windows (named pipes) has no entry.
ENDPOINT_STRATEGIES: Dict[str, Callable[[], str]] = {
    "linux": _unix_socket_endpoint,
    "darwin": _unix_socket_endpoint,
}


class RuntimeProbe:
    """
    Stateless boolean checks against the host.
    """

    def __init__(self, platform: Optional[str] = None):
        """
        Args:
            platform: sys.platform value to resolve endpoints for. Defaults to the host's.
        """
        self.platform = platform or sys.platform

    def is_installed(self, executable: str = "docker") -> bool:
        """Check whether the runtime executable is on PATH."""
        return shutil.which(executable) is not None

    def default_endpoint(self) -> str:
        """
        Resolve the control endpoint for this platform.

        Raises:
            UnsupportedPlatformError: If no strategy is registered for the platform.
        """
        for prefix, strategy in ENDPOINT_STRATEGIES.items():
            if self.platform.startswith(prefix):
                return strategy()
        raise UnsupportedPlatformError(self.platform)

    def is_reachable(self, endpoint: str, timeout: Optional[float] = None) -> bool:
        """
        Check whether the control endpoint can be reached.

        unix:// endpoints are checked for socket existence, tcp:// endpoints
        with a plain TCP connect.

        Raises:
            UnsupportedPlatformError: For any other endpoint scheme.
        """
        parsed = urlparse(endpoint)

        if parsed.scheme in ("unix", "http+unix"):
            return os.path.exists(parsed.path)

        if parsed.scheme in ("tcp", "http", "https"):
            if not parsed.hostname:
                return False
            port = parsed.port or (443 if parsed.scheme == "https" else 2375)
            try:
                with socket.create_connection((parsed.hostname, port), timeout=timeout):
                    return True
            except OSError:
                return False

        raise UnsupportedPlatformError(parsed.scheme or endpoint)
