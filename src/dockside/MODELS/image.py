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
Models representing images, both as requested by callers and as listed by the daemon.
"""
from typing import ClassVar, List, Optional
from pydantic import BaseModel, ConfigDict


class Image(BaseModel):
    """
    A repository and tag pair, e.g. ``ubuntu`` + ``20.04``.

    Examples:
        - ubuntu:20.04 -> Image(repository="ubuntu", tag="20.04")
        - nomiclabs/solc:0.8.9 -> Image(repository="nomiclabs/solc", tag="0.8.9")
        - localhost:5000/tools -> Image(repository="localhost:5000/tools", tag="latest")
    """
    model_config = ConfigDict(frozen=True)

    repository: str
    tag: str

    DEFAULT_TAG: ClassVar[str] = "latest"

    @classmethod
    def parse(cls, reference: str) -> "Image":
        """
        Parse a ``repository[:tag]`` string.

        Args:
            reference: Image reference string (e.g., 'ubuntu:20.04', 'myuser/myimage')

        Returns:
            Parsed Image.
        """
        if not reference:
            raise ValueError("Empty image reference")

        repository = reference
        tag = cls.DEFAULT_TAG
        if ":" in reference:
            last_colon = reference.rfind(":")
            after_colon = reference[last_colon + 1:]
            if not after_colon:
                raise ValueError(f"Empty tag in image reference: {reference}")
            # A slash after the colon means it was a registry port
            if "/" not in after_colon:
                repository = reference[:last_colon]
                tag = after_colon

        if not repository:
            raise ValueError(f"Invalid image reference: {reference}")

        return cls(repository=repository, tag=tag)

    @property
    def repo_tag(self) -> str:
        """Canonical ``repository:tag`` form shared by the daemon and the registry."""
        return f"{self.repository}:{self.tag}"

    def __str__(self) -> str:
        return self.repo_tag


class ImageSummary(BaseModel):
    """
    One entry of the daemon's local image list.
    """
    id: str
    repo_tags: Optional[List[str]] = None
