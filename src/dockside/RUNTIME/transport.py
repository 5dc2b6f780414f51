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
Daemon transport: the narrow interface DockerSandbox needs from the Docker
daemon, and its implementation on top of the docker SDK.

Transports also classify their own failures into a DaemonFailure so the error
translator never has to probe exception attributes itself.
"""
import errno
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Protocol

import docker
from docker.errors import APIError

from ..MODELS.container_config import RunOptions
from ..MODELS.image import ImageSummary
from ..UTILS.logger import get_logger

log = get_logger(__name__)


class FailureKind(str, Enum):
    """Shape of a daemon failure."""

    CONNECTION_REFUSED = "connection_refused"
    HTTP_STATUS = "http_status"
    OTHER = "other"


@dataclass(frozen=True)
class DaemonFailure:
    """Structured description of an exception raised by a transport."""

    kind: FailureKind
    status_code: Optional[int] = None
    message: str = ""


class DaemonTransport(Protocol):
    """Interface to the container daemon."""

    def ping(self) -> str:
        """Return the daemon's acknowledgement, "OK" when healthy."""
        ...

    def list_images(self) -> List[ImageSummary]:
        ...

    def pull(self, repo_tag: str) -> Iterator[Dict[str, Any]]:
        """Start a pull and return its progress events."""
        ...

    def run(
        self,
        repo_tag: str,
        command: List[str],
        stdout: BinaryIO,
        stderr: BinaryIO,
        options: RunOptions,
    ) -> int:
        """Run a container to completion, writing its output to the sinks. Returns the exit code."""
        ...

    def describe_failure(self, error: BaseException) -> DaemonFailure:
        ...


def _is_connection_refused(error: BaseException) -> bool:
    """Walk an exception chain (causes, contexts, wrapped args) looking for ECONNREFUSED."""
    pending = [error]
    seen = set()
    while pending:
        current = pending.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))

        if isinstance(current, ConnectionRefusedError):
            return True
        if isinstance(current, OSError) and current.errno == errno.ECONNREFUSED:
            return True

        for linked in (current.__cause__, current.__context__, getattr(current, "reason", None)):
            if isinstance(linked, BaseException):
                pending.append(linked)
        pending.extend(arg for arg in current.args if isinstance(arg, BaseException))
    return False


def describe_failure(error: BaseException) -> DaemonFailure:
    """
    Classify an exception raised by the docker SDK.

    Connection-level failures are checked first since they carry no status code.
    """
    if _is_connection_refused(error):
        return DaemonFailure(FailureKind.CONNECTION_REFUSED, message=str(error))

    if isinstance(error, APIError) and error.status_code is not None:
        return DaemonFailure(
            FailureKind.HTTP_STATUS,
            status_code=error.status_code,
            message=error.explanation or str(error),
        )

    return DaemonFailure(FailureKind.OTHER, message=str(error))


class DockerTransport:
    """
    DaemonTransport backed by docker-py.
    """

    def __init__(self, endpoint: str, timeout: Optional[float] = None):
        """
        Connect to the daemon.

        Args:
            endpoint: Daemon URL, e.g. 'unix:///var/run/docker.sock'.
            timeout: Request timeout in seconds. None means no timeout.
        """
        self.endpoint = endpoint
        self.client = docker.DockerClient(base_url=endpoint, timeout=timeout)
        log.debug("docker client initialized", endpoint=endpoint)

    describe_failure = staticmethod(describe_failure)

    def ping(self) -> str:
        # docker-py compares the body against "OK" for us
        return "OK" if self.client.api.ping() else ""

    def list_images(self) -> List[ImageSummary]:
        return [
            ImageSummary(id=entry["Id"], repo_tags=entry.get("RepoTags"))
            for entry in self.client.api.images()
        ]

    def pull(self, repo_tag: str) -> Iterator[Dict[str, Any]]:
        return self.client.api.pull(repo_tag, stream=True, decode=True)

    def run(
        self,
        repo_tag: str,
        command: List[str],
        stdout: BinaryIO,
        stderr: BinaryIO,
        options: RunOptions,
    ) -> int:
        create_kwargs: Dict[str, Any] = {
            "tty": options.tty,
            "entrypoint": options.entrypoint,
            "volumes": options.binds,
        }
        if options.working_dir:
            create_kwargs["working_dir"] = options.working_dir
        if options.network_mode:
            create_kwargs["network_mode"] = options.network_mode

        container = self.client.containers.create(repo_tag, command, **create_kwargs)
        log.debug("container created", container=container.short_id, image=repo_tag)

        output = None
        try:
            # Attach before start so no early output is lost
            output = container.attach(stdout=True, stderr=True, stream=True, logs=True, demux=True)
            container.start()

            for out_chunk, err_chunk in output:
                if out_chunk:
                    stdout.write(out_chunk)
                if err_chunk:
                    stderr.write(err_chunk)

            status_code = container.wait()["StatusCode"]
        except BaseException:
            self._release(container, output, options.auto_remove, failing=True)
            raise

        self._release(container, output, options.auto_remove)
        return status_code

    def _release(self, container, output, remove: bool, failing: bool = False) -> None:
        """
        Close the attach stream and, for auto-removed runs, remove the container.

        Removal happens client-side once the exit code has been read, like
        docker-py's containers.run(remove=True). While another error is
        propagating a removal failure is logged instead of raised.
        """
        if output is not None:
            output.close()
        if not remove:
            return

        try:
            container.remove(force=True)
        except Exception:
            if not failing:
                raise
            log.warning("container removal failed", container=container.short_id, exc_info=True)
