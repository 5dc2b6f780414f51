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
DockerSandbox: checks, pulls and one-shot runs against a Docker daemon.

Typical use:

    sandbox = DockerSandbox.create()
    image = Image(repository="ethereum/solc", tag="0.8.9")
    if not sandbox.has_pulled_image(image) or not sandbox.is_image_up_to_date(image):
        sandbox.pull_image(image)
    result = sandbox.run_container(image, ["solc", "--version"])
"""
import io
from typing import List, Optional

from ..errors import (
    BadGatewayError,
    ImageDoesntExistError,
    RuntimeNotInstalledError,
    RuntimeNotRunningError,
)
from ..MODELS.container_config import ContainerConfig, ProcessResult, RunOptions
from ..MODELS.image import Image, ImageSummary
from ..MODELS.settings import DockerSettings
from ..REGISTRY.registry_client import RegistryClient
from ..RUNTIME.bind_validator import binds_to_list, validate_binds
from ..RUNTIME.error_translator import common_errors
from ..RUNTIME.probe import RuntimeProbe
from ..RUNTIME.transport import DaemonTransport, DockerTransport
from ..UTILS.logger import get_logger

log = get_logger(__name__)

PING_OK = "OK"


class DockerSandbox:
    """
    Facade over the Docker daemon and registry.

    Build it with DockerSandbox.create(), which verifies the runtime is
    installed and reachable. The instance holds no per-call state and can be
    shared between threads.
    """

    def __init__(
        self,
        transport: DaemonTransport,
        registry: RegistryClient,
        settings: Optional[DockerSettings] = None,
    ):
        """
        Wrap already-constructed dependencies. Prefer create().

        :param transport: Daemon transport.
        :param registry: Registry client.
        :param settings: Settings the dependencies were built from.
        """
        self._transport = transport
        self._registry = registry
        self.settings = settings or DockerSettings()

    @classmethod
    def create(
        cls,
        settings: Optional[DockerSettings] = None,
        transport: Optional[DaemonTransport] = None,
        registry: Optional[RegistryClient] = None,
        probe: Optional[RuntimeProbe] = None,
    ) -> "DockerSandbox":
        """
        Verify the runtime and build a ready sandbox.

        Args:
            settings: Endpoint and registry settings. Defaults to DockerSettings().
            transport: Daemon transport to use instead of a DockerTransport.
            registry: Registry client to use instead of a default one.
            probe: Host probe to use instead of a default one.

        Raises:
            RuntimeNotInstalledError: If the runtime executable is not on PATH.
            UnsupportedPlatformError: If no endpoint can be resolved for this platform.
            RuntimeNotRunningError: If the endpoint is not reachable.
        """
        settings = settings or DockerSettings()
        probe = probe or RuntimeProbe()

        if not probe.is_installed(settings.executable):
            raise RuntimeNotInstalledError()

        endpoint = settings.endpoint or probe.default_endpoint()
        if not probe.is_reachable(endpoint, timeout=settings.timeout):
            raise RuntimeNotRunningError(f"Docker is not running: {endpoint} is not reachable")

        if transport is None:
            with common_errors():
                transport = DockerTransport(endpoint, timeout=settings.timeout)

        log.debug("docker sandbox ready", endpoint=endpoint)
        return cls(transport, registry or RegistryClient(settings), settings)

    @staticmethod
    def is_installed(executable: str = "docker", probe: Optional[RuntimeProbe] = None) -> bool:
        """Check whether the runtime executable is on PATH."""
        return (probe or RuntimeProbe()).is_installed(executable)

    @staticmethod
    def image_to_repo_tag(image: Image) -> str:
        """Format an image as ``repository:tag``."""
        return image.repo_tag

    def is_running(self) -> bool:
        """
        Ping the daemon.

        Returns:
            True if the daemon acknowledged with "OK", False if it is not
            running or answered with a bad gateway.
        """
        try:
            with common_errors(self._transport.describe_failure):
                return self._transport.ping() == PING_OK
        except (RuntimeNotRunningError, BadGatewayError):
            return False

    def image_exists(self, image: Image) -> bool:
        """Check whether the image tag exists in the registry."""
        return self._registry.tag_exists(image)

    def has_pulled_image(self, image: Image) -> bool:
        """Check whether the daemon has a local copy of the image tag."""
        return self._find_local_image(image) is not None

    def is_image_up_to_date(self, image: Image) -> bool:
        """
        Check whether the local copy matches the registry.

        Returns False without contacting the registry if the image was never
        pulled. Registry failures propagate as RegistryConnectionError.
        """
        local = self._find_local_image(image)
        if local is None:
            return False

        remote_id = self._registry.get_manifest_digest(image)
        return local.id == remote_id

    def pull_image(self, image: Image) -> None:
        """
        Pull an image, blocking until the daemon finishes.

        Progress events are drained but not inspected; the end of the stream
        is taken as completion.

        Raises:
            ImageDoesntExistError: If the tag is not in the registry.
        """
        if not self.image_exists(image):
            raise ImageDoesntExistError(image)

        repo_tag = self.image_to_repo_tag(image)
        log.info("pulling image", image=repo_tag)

        with common_errors(self._transport.describe_failure):
            for _ in self._transport.pull(repo_tag):
                pass

        log.info("pulled image", image=repo_tag)

    def run_container(
        self,
        image: Image,
        command: List[str],
        config: Optional[ContainerConfig] = None,
    ) -> ProcessResult:
        """
        Run a one-shot container and capture its output.

        The image entrypoint is cleared so command runs directly, and the
        container is removed once it exits.

        Args:
            image: Image to run.
            command: Command and arguments.
            config: Working directory, binds and network mode.

        Returns:
            ProcessResult with the exit code and captured stdout/stderr.

        Raises:
            BindDoesntExistInHostError: If a bind source is missing; the daemon is not contacted.
            ExecutableNotFoundError: If the command is not in the image.
        """
        config = config or ContainerConfig()
        validate_binds(config.binds)

        options = RunOptions(
            working_dir=config.working_directory,
            binds=binds_to_list(config.binds),
            network_mode=config.network_mode,
        )

        repo_tag = self.image_to_repo_tag(image)
        stdout = io.BytesIO()
        stderr = io.BytesIO()

        log.info("running container", image=repo_tag, command=command)
        with common_errors(self._transport.describe_failure):
            status_code = self._transport.run(repo_tag, command, stdout, stderr, options)
        log.debug("container exited", image=repo_tag, status_code=status_code)

        return ProcessResult(
            status_code=status_code,
            stdout=stdout.getvalue(),
            stderr=stderr.getvalue(),
        )

    def _find_local_image(self, image: Image) -> Optional[ImageSummary]:
        """First local image whose repo tags contain the image's repo tag."""
        repo_tag = self.image_to_repo_tag(image)

        with common_errors(self._transport.describe_failure):
            images = self._transport.list_images()

        for entry in images:
            if entry.repo_tags is not None and repo_tag in entry.repo_tags:
                return entry
        return None
