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
Error taxonomy for dockside.

Every low-level failure (docker SDK, socket, HTTP) is converted into one of
these exactly once, at the boundary that produced it.
"""
from typing import Optional


class DocksideError(Exception):
    """
    Base class for all dockside errors.

    Attributes:
        cause: The low-level exception this error was translated from, if any.
    """

    default_message = "Docker error"

    def __init__(self, message: Optional[str] = None, cause: Optional[BaseException] = None):
        self.cause = cause
        if message is None:
            message = self.default_message
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)


class RuntimeNotInstalledError(DocksideError):
    """The container runtime executable is not on PATH."""

    default_message = "Docker is not installed"


class RuntimeNotRunningError(DocksideError):
    """The daemon control endpoint is unreachable."""

    default_message = "Docker is not running"


class UnsupportedPlatformError(DocksideError):
    """No control endpoint strategy exists for this platform or endpoint scheme."""

    def __init__(self, platform: str):
        self.platform = platform
        super().__init__(f"Docker endpoint resolution is not supported for '{platform}'")


class BadGatewayError(DocksideError):
    """The daemon API answered 502."""

    default_message = "Docker returned a bad gateway response"


class ServerError(DocksideError):
    """The daemon API answered 500."""

    default_message = "Docker server error"


class ExecutableNotFoundError(DocksideError):
    """The requested command does not exist inside the image."""

    default_message = "Executable not found in the container image"


class ImageDoesntExistError(DocksideError):
    """A pull was requested for a tag the registry does not know."""

    def __init__(self, image):
        self.image = image
        super().__init__(f"Image {image.repo_tag} doesn't exist")


class BindDoesntExistInHostError(DocksideError):
    """A bind-mount source path is missing on the host."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Bind mount source {path} doesn't exist in the host")


class RegistryConnectionError(DocksideError):
    """Any failure talking to the registry or its auth service."""

    default_message = "Error connecting to the Docker registry"
