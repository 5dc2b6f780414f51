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
Resolution of an Image into the paths and URLs the registry API expects.
"""
from dataclasses import dataclass
from urllib.parse import urlencode

from ..MODELS.image import Image


@dataclass(frozen=True)
class ImageReference:
    """
    An Image as the registry addresses it.

    Examples:
        - ubuntu:20.04 -> library/ubuntu, 20.04
        - nomiclabs/solc:0.8.9 -> nomiclabs/solc, 0.8.9
    """

    repository: str
    tag: str

    OFFICIAL_NAMESPACE = "library"

    @classmethod
    def from_image(cls, image: Image) -> "ImageReference":
        """
        Build a registry reference from an Image.

        Args:
            image: The requested image.

        Returns:
            ImageReference with the repository path resolved.
        """
        return cls(repository=cls.repository_path(image.repository), tag=image.tag)

    @classmethod
    def repository_path(cls, repository: str) -> str:
        """
        Resolve a repository name to its registry path.
        Single-segment names are Docker Hub official images and live under 'library/'.
        """
        if "/" in repository:
            return repository
        return f"{cls.OFFICIAL_NAMESPACE}/{repository}"

    @property
    def pull_scope(self) -> str:
        """Token scope granting pull access to this repository."""
        return f"repository:{self.repository}:pull"

    def tag_url(self, hub_url: str) -> str:
        """Docker Hub endpoint describing this tag."""
        return f"{hub_url.rstrip('/')}/v2/repositories/{self.repository}/tags/{self.tag}/"

    def manifest_url(self, registry_url: str) -> str:
        """Registry API V2 manifest endpoint for this tag."""
        return f"{registry_url.rstrip('/')}/v2/{self.repository}/manifests/{self.tag}"

    def token_url(self, auth_url: str, service: str) -> str:
        """Auth service endpoint issuing an anonymous pull token."""
        params = {"scope": self.pull_scope, "service": service}
        return f"{auth_url.rstrip('/')}/token?{urlencode(params, safe='/:')}"
