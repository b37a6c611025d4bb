"""Container image naming conventions for the supported release targets."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict


class ReleaseTarget(str, Enum):
    """Registry conventions an image can be released to."""

    GAR = "gar"  # Google Artifact Registry
    GHCR = "ghcr"  # GitHub Container Registry


@dataclass(frozen=True)
class ImageReference:
    """Parts of a fully qualified image name.

    An empty app or tag is a caller error and is rejected on construction.
    """

    registry: str
    team: str
    app: str
    tag: str

    def __post_init__(self):
        if not self.app:
            raise ValueError("app is required")
        if not self.tag:
            raise ValueError("tag is required")


class ImageNameFormatter(ABC):
    """Formats an ImageReference into an image name."""

    @abstractmethod
    def format(self, ref: ImageReference) -> str:
        pass


class GarImageName(ImageNameFormatter):
    """registry/team/app:tag"""

    def format(self, ref: ImageReference) -> str:
        return f"{ref.registry}/{ref.team}/{ref.app}:{ref.tag}"


class GhcrImageName(ImageNameFormatter):
    """registry/app:tag, the team is not part of the name."""

    def format(self, ref: ImageReference) -> str:
        return f"{ref.registry}/{ref.app}:{ref.tag}"


FORMATTERS: Dict[ReleaseTarget, ImageNameFormatter] = {
    ReleaseTarget.GAR: GarImageName(),
    ReleaseTarget.GHCR: GhcrImageName(),
}


def format_image_name(target: ReleaseTarget, ref: ImageReference) -> str:
    """Format an image name using the convention of the release target."""
    return FORMATTERS[ReleaseTarget(target)].format(ref)
