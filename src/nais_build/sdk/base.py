"""
Base SDK interface.

An SDK knows how to recognise a source tree from a marker file, which build
targets the tree contains, and how to render a Dockerfile building them.
"""

import logging
import stat
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, ClassVar, List, Tuple

from ..config import SdkImages
from ..exceptions import DetectionError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SdkVariant:
    """Resolved build description of a detected SDK.

    The script generator is a pure function of the resolved targets and
    images; calling dockerfile() performs no I/O.
    """

    name: str
    source_directory: Path
    builder_image: str
    runtime_image: str
    build_targets: Tuple[str, ...]
    script_generator: Callable[[], str] = field(repr=False, compare=False)

    def dockerfile(self) -> str:
        return self.script_generator()


class Sdk(ABC):
    """A build tool ecosystem recognised by a marker file."""

    name: ClassVar[str]
    marker: ClassVar[str]

    def __init__(self, source_directory: Path, images: SdkImages):
        self.source_directory = Path(source_directory)
        self.images = images

    @classmethod
    def probe(cls, source_directory: Path) -> bool:
        """Check whether the marker file of this SDK exists.

        Returns False when the marker is absent. Any other filesystem error
        is raised as a DetectionError instead of being treated as absent.
        """
        path = Path(source_directory) / cls.marker
        try:
            st = path.stat()
        except (FileNotFoundError, NotADirectoryError):
            return False
        except OSError as e:
            raise DetectionError(f"detect {cls.name} SDK: {path}: {e}") from e
        return stat.S_ISREG(st.st_mode)

    @abstractmethod
    def build_targets(self) -> List[str]:
        """Return the build targets of the source tree, in stable order."""
        pass

    @abstractmethod
    def render(self, targets: Tuple[str, ...]) -> str:
        """Render a Dockerfile building the given targets."""
        pass

    def describe(self) -> SdkVariant:
        targets = tuple(self.build_targets())
        log.debug(f"{self.name} build targets: {', '.join(targets) or '(none)'}")
        return SdkVariant(
            name=self.name,
            source_directory=self.source_directory,
            builder_image=self.images.build_docker_image,
            runtime_image=self.images.runtime_docker_image,
            build_targets=targets,
            script_generator=lambda: self.render(targets),
        )
