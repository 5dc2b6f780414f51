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
Fakes for the daemon transport, registry and host probe.
"""
import pytest

from dockside.MANAGERS.docker_sandbox import DockerSandbox
from dockside.MODELS.image import ImageSummary
from dockside.RUNTIME.transport import DaemonFailure, FailureKind


class FakeDaemonError(Exception):
    """Raised by FakeTransport; classified by FakeTransport.describe_failure."""

    def __init__(self, message="daemon error", status_code=None, refused=False):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.refused = refused


class FakeTransport:
    """In-memory DaemonTransport recording every call."""

    def __init__(self):
        self.ping_result = "OK"
        self.images = []
        self.pull_events = [{"status": "Pulling fs layer"}, {"status": "Download complete"}]
        self.exit_code = 0
        self.output = (b"", b"")
        self.error = None
        # Raised from the pull stream once pull_events are exhausted
        self.pull_error = None

        self.calls = []
        self.pulled = []
        self.runs = []
        self.drained_events = 0

    def describe_failure(self, error):
        if isinstance(error, FakeDaemonError):
            if error.refused:
                return DaemonFailure(FailureKind.CONNECTION_REFUSED, message=error.message)
            if error.status_code is not None:
                return DaemonFailure(FailureKind.HTTP_STATUS, error.status_code, error.message)
        return DaemonFailure(FailureKind.OTHER, message=str(error))

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def ping(self):
        self.calls.append("ping")
        self._maybe_fail()
        return self.ping_result

    def list_images(self):
        self.calls.append("list_images")
        self._maybe_fail()
        return list(self.images)

    def pull(self, repo_tag):
        self.calls.append("pull")
        self._maybe_fail()
        self.pulled.append(repo_tag)
        return self._events()

    def _events(self):
        for event in self.pull_events:
            self.drained_events += 1
            yield event
        if self.pull_error is not None:
            raise self.pull_error

    def run(self, repo_tag, command, stdout, stderr, options):
        self.calls.append("run")
        self._maybe_fail()
        self.runs.append((repo_tag, command, options))
        stdout.write(self.output[0])
        stderr.write(self.output[1])
        return self.exit_code

    def add_image(self, image_id, *repo_tags):
        self.images.append(ImageSummary(id=image_id, repo_tags=list(repo_tags) if repo_tags else None))


class FakeRegistry:
    """Stands in for RegistryClient."""

    def __init__(self, exists=True, digest="sha256:remote"):
        self.exists = exists
        self.digest = digest
        self.error = None
        self.calls = []

    def tag_exists(self, image):
        self.calls.append(("tag_exists", image.repo_tag))
        if self.error is not None:
            raise self.error
        return self.exists

    def get_manifest_digest(self, image):
        self.calls.append(("get_manifest_digest", image.repo_tag))
        if self.error is not None:
            raise self.error
        return self.digest


class FakeProbe:
    """Stands in for RuntimeProbe."""

    def __init__(self, installed=True, reachable=True, endpoint="unix:///var/run/docker.sock"):
        self.installed = installed
        self.reachable = reachable
        self.endpoint = endpoint
        self.checked_endpoints = []

    def is_installed(self, executable="docker"):
        return self.installed

    def default_endpoint(self):
        return self.endpoint

    def is_reachable(self, endpoint, timeout=None):
        self.checked_endpoints.append(endpoint)
        return self.reachable


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def sandbox(transport, registry):
    return DockerSandbox.create(transport=transport, registry=registry, probe=FakeProbe())
