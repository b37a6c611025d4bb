"""Detection and parsing of the application manifest (nais.yaml)."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from .exceptions import ManifestError

log = logging.getLogger(__name__)

CANDIDATES = (
    ".nais.yaml",
    ".nais.yml",
    ".naiserator.yaml",
    ".naiserator.yml",
    "nais.yaml",
    "nais.yml",
    "naiserator.yaml",
    "naiserator.yml",
    "dev-gcp.yaml",
    "dev-gcp.yml",
    "dev-fss.yaml",
    "dev-fss.yml",
    "dev.yml",
    "prod-gcp.yaml",
    "prod-gcp.yml",
    "prod-fss.yaml",
    "prod-fss.yml",
    "prod.yml",
)

TEMPLATE_EXPRESSION = re.compile(r"\{\{.*?\}\}")
TEMPLATE_PLACEHOLDER = "nb-templated-value"


def _literal(value) -> str:
    """Return a metadata value, or "" if it was set by a template expression."""
    value = str(value)
    if TEMPLATE_PLACEHOLDER in value:
        return ""
    return value


def detect_nais_yaml(source_directory: Path) -> Path:
    """Return the best manifest candidate in the project root or .nais directory.

    Raises:
        ManifestError: If no candidate file exists
    """
    source_directory = Path(source_directory)
    for directory in (source_directory, source_directory / ".nais"):
        for name in CANDIDATES:
            path = directory / name
            if path.is_file():
                log.debug(f"Using manifest {path}")
                return path

    raise ManifestError(f"no nais.yaml found in {source_directory}")


@dataclass(frozen=True)
class NaisYaml:
    """Team and app of a manifest. Values set by deploy-time templates are empty."""

    team: str
    app: str

    @classmethod
    def parse(cls, text: str) -> "NaisYaml":
        """Read metadata.name and metadata.namespace from the first document."""
        # Deploy-time template expressions are not valid YAML scalars
        text = TEMPLATE_EXPRESSION.sub(TEMPLATE_PLACEHOLDER, text)
        try:
            document = next(
                (d for d in yaml.safe_load_all(text) if d is not None), None
            )
        except yaml.YAMLError as e:
            raise ManifestError(f"deserialize: {e}") from e

        metadata = document.get("metadata") if isinstance(document, dict) else None
        if not isinstance(metadata, dict):
            raise ManifestError("manifest has no metadata section")

        name = metadata.get("name")
        namespace = metadata.get("namespace")
        if not name or not namespace:
            raise ManifestError("manifest metadata must contain name and namespace")

        return cls(team=_literal(namespace), app=_literal(name))

    @classmethod
    def parse_file(cls, path: Path) -> "NaisYaml":
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"read {path}: {e}") from e
        return cls.parse(text)
