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
Docker registry client for tag existence and manifest digest lookups.
Implements the parts of the Docker Hub and Registry HTTP API V2 we need.

Nothing is cached: every call talks to the registry.
"""

import json
from http.client import HTTPException
from typing import Any, Callable, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import RegistryConnectionError
from ..MODELS.image import Image
from ..MODELS.settings import DockerSettings
from ..UTILS.logger import get_logger
from .image_reference import ImageReference

log = get_logger(__name__)

# Everything urlopen and a response read can raise besides HTTPError
TRANSPORT_ERRORS = (URLError, HTTPException, OSError)


class RegistryClient:
    """
    Stateless client for the registry and its token service.
    """

    def __init__(
        self,
        settings: Optional[DockerSettings] = None,
        opener: Callable[..., Any] = urlopen,
    ):
        """
        Initialize the registry client.

        Args:
            settings: Registry endpoints and timeout. Defaults to Docker Hub.
            opener: urlopen-compatible callable used for every request.
        """
        self.settings = settings or DockerSettings()
        self._opener = opener

    def _open(self, request: Request):
        return self._opener(request, timeout=self.settings.timeout)

    def tag_exists(self, image: Image) -> bool:
        """
        Check anonymously whether a tag exists on Docker Hub.

        Args:
            image: Image to look up.

        Returns:
            True if the tag endpoint answers with a 2xx status.

        Raises:
            RegistryConnectionError: If the registry cannot be reached.
        """
        ref = ImageReference.from_image(image)
        url = ref.tag_url(self.settings.hub_url)
        log.debug("checking tag existence", url=url)

        try:
            with self._open(Request(url)) as response:
                # Drain the body so the connection is released
                response.read()
                return 200 <= response.status <= 299
        except HTTPError as e:
            try:
                e.read()
            finally:
                e.close()
            return False
        except TRANSPORT_ERRORS as e:
            raise RegistryConnectionError(cause=e) from e

    def get_token(self, ref: ImageReference) -> str:
        """
        Get an anonymous pull token for a repository.

        Raises:
            RegistryConnectionError: On transport errors, non-2xx answers or a malformed body.
        """
        url = ref.token_url(self.settings.auth_url, self.settings.auth_service)
        data = self._get_json(Request(url), "auth")

        try:
            return data["token"]
        except (KeyError, TypeError) as e:
            raise RegistryConnectionError("Docker registry auth response has no token", cause=e) from e

    def get_manifest_digest(self, image: Image) -> str:
        """
        Resolve the config digest of a tag's manifest.

        The digest is what the daemon reports as the local image ID, which
        makes it suitable for freshness comparisons.

        Args:
            image: Image to resolve.

        Returns:
            Digest string, e.g. 'sha256:...'.

        Raises:
            RegistryConnectionError: If the token or manifest request fails.
        """
        ref = ImageReference.from_image(image)
        token = self.get_token(ref)

        request = Request(ref.manifest_url(self.settings.registry_url))
        request.add_header("Accept", self.settings.manifest_media_type)
        request.add_header("Authorization", f"Bearer {token}")
        manifest = self._get_json(request, "manifest")

        try:
            return manifest["config"]["digest"]
        except (KeyError, TypeError) as e:
            raise RegistryConnectionError("Docker registry manifest has no config digest", cause=e) from e

    def _get_json(self, request: Request, description: str) -> Dict[str, Any]:
        """Make a request and decode its JSON body, wrapping every failure."""
        log.debug("registry request", kind=description, url=request.full_url)
        try:
            with self._open(request) as response:
                body = response.read()
            return json.loads(body.decode())
        except HTTPError as e:
            try:
                detail = e.read().decode(errors="replace")
            finally:
                e.close()
            raise RegistryConnectionError(
                f"Docker registry {description} request not successful ({e.code}): {detail}",
                cause=e,
            ) from e
        except TRANSPORT_ERRORS as e:
            raise RegistryConnectionError(cause=e) from e
        except ValueError as e:
            raise RegistryConnectionError(
                f"Docker registry {description} response is not valid JSON", cause=e
            ) from e
