"""Configuration management for the nb CLI.

Settings are read from the built-in default.toml with an optional user file
(nb.toml) merged on top of it.
"""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from .exceptions import ConfigurationError
from .image_name import ReleaseTarget

try:
    import tomllib
except ImportError:  # python < 3.11
    import tomli as tomllib

log = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "nb.toml"


class SdkImages(BaseModel):
    """Docker images used to build and run applications of one SDK."""

    build_docker_image: str
    runtime_docker_image: str


class SdkSettings(BaseModel):
    go: SdkImages
    gradle: SdkImages
    maven: SdkImages
    rust: SdkImages


class DockerSettings(BaseModel):
    tag: str


class BuildSettings(BaseModel):
    docker: DockerSettings


class RegistrySettings(BaseModel):
    registry: str


class ReleaseSettings(BaseModel):
    type: ReleaseTarget
    gar: RegistrySettings
    ghcr: RegistrySettings

    @property
    def params(self) -> RegistrySettings:
        """Registry parameters of the active release target."""
        if self.type == ReleaseTarget.GAR:
            return self.gar
        return self.ghcr

    @property
    def registry(self) -> str:
        return self.params.registry


class DeploySettings(BaseModel):
    tenant: str
    nais_yaml: str = ""

    @property
    def deploy_server(self) -> str:
        return f"https://deploy.{self.tenant}.cloud.nais.io"


class Settings(BaseModel):
    """A complete, merged nb configuration."""

    description: Optional[str] = None
    team: str = ""
    sdk: SdkSettings
    build: BuildSettings
    release: ReleaseSettings
    deploy: DeploySettings = Field(default_factory=lambda: DeploySettings(tenant="nav"))


def merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge override into a copy of base.

    Tables are merged key by key; any other value in override replaces the
    value in base.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def default_config() -> Dict[str, Any]:
    """Load the built-in default configuration."""
    text = resources.files("nais_build").joinpath("default.toml").read_text(
        encoding="utf-8"
    )
    return tomllib.loads(text)


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except OSError as e:
        raise ConfigurationError(f"read configuration file {path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"configuration file syntax error: {path}: {e}") from e


def find_config_file(
    config_file: Optional[str], source_directory: Path
) -> Optional[Path]:
    """
    Resolve the configuration file to use.

    An explicitly given file must exist. Otherwise nb.toml in the source
    directory is used implicitly if present.
    """
    if config_file:
        return Path(config_file)

    implicit = source_directory / DEFAULT_CONFIG_FILE
    if implicit.is_file():
        return implicit
    return None


def load_settings(
    config_file: Optional[str] = None, source_directory: Path = Path(".")
) -> Settings:
    """Load default settings with an optional user configuration file merged on top.

    Raises:
        ConfigurationError: If the file cannot be read, parsed or validated
    """
    data = default_config()

    path = find_config_file(config_file, source_directory)
    if path is not None:
        log.debug(f"Reading configuration file {path}")
        data = merge(data, _read_toml(path))

    try:
        return Settings.model_validate(data)
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
