"""
SDK detection.

Known SDKs are probed in a fixed priority order and the first one whose
marker file exists is used:

    go.mod -> gradlew -> pom.xml -> Cargo.toml
"""

import logging
from pathlib import Path
from typing import Tuple, Type

from ..config import SdkSettings
from ..exceptions import SdkNotDetectedError
from .base import Sdk, SdkVariant
from .golang import Golang
from .jvm import Gradle, Maven
from .rust import Rust

log = logging.getLogger(__name__)

# Detection order. First match wins.
SDK_PRIORITY: Tuple[Type[Sdk], ...] = (Golang, Gradle, Maven, Rust)


def detect(source_directory: Path, settings: SdkSettings) -> SdkVariant:
    """Detect the SDK of a source tree and resolve its build description.

    Args:
        source_directory: Root of the source tree
        settings: Builder and runtime images per SDK

    Returns:
        The build description of the first matching SDK

    Raises:
        SdkNotDetectedError: If no SDK marker is present
        DetectionError: If probing fails for a reason other than a missing marker
        BuildTargetError: If the matching SDK cannot list its build targets
    """
    source_directory = Path(source_directory)
    for sdk_class in SDK_PRIORITY:
        if not sdk_class.probe(source_directory):
            continue
        log.info(f"Detected {sdk_class.name} SDK in {source_directory}")
        sdk = sdk_class(source_directory, getattr(settings, sdk_class.name))
        return sdk.describe()

    raise SdkNotDetectedError()


__all__ = [
    "SDK_PRIORITY",
    "Golang",
    "Gradle",
    "Maven",
    "Rust",
    "Sdk",
    "SdkVariant",
    "detect",
]
