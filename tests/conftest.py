"""
Test configuration and fixtures for nais_build tests.

Provides shared fixtures for:
- Default settings
- Source trees for each supported SDK
- Git metadata
- Environment variable management
"""

from pathlib import Path
from typing import Dict
from unittest.mock import MagicMock

import pytest

from nais_build.config import Settings, load_settings
from nais_build.git import GitMetadata

NAIS_YAML = """\
apiVersion: nais.io/v1alpha1
kind: Application
metadata:
  name: myapp
  namespace: myteam
spec:
  image: {{ image }}
"""


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Provide the built-in default settings.

    Returns:
        Settings loaded without any user configuration file.
    """
    return load_settings(None, tmp_path / "no-config-here")


@pytest.fixture
def go_project(tmp_path: Path) -> Path:
    """Provide a Go module with two commands, svcA and svcB.

    Returns:
        Path to the project root.
    """
    (tmp_path / "go.mod").write_text("module example.com/app\n\ngo 1.22\n")
    (tmp_path / "cmd" / "svcB").mkdir(parents=True)
    (tmp_path / "cmd" / "svcA").mkdir(parents=True)
    (tmp_path / "cmd" / "svcA" / "main.go").write_text("package main\n")
    (tmp_path / "cmd" / "svcB" / "main.go").write_text("package main\n")
    (tmp_path / "nais.yaml").write_text(NAIS_YAML)
    return tmp_path


@pytest.fixture
def git_metadata() -> GitMetadata:
    return GitMetadata(
        commit="0123456789abcdef0123456789abcdef01234567",
        short_commit="0123456",
        dirty=False,
        owner="navikt",
        repository="myapp",
    )


@pytest.fixture
def deploy_env() -> Dict[str, str]:
    """Provide a complete deploy environment.

    Returns:
        Environment mapping with deploy credentials and server.
    """
    return {
        "NAIS_DEPLOY_APIKEY": "deploy-key",
        "NAIS_DEPLOY_SERVER": "https://deploy.example.com",
    }


@pytest.fixture
def engine() -> MagicMock:
    """Provide a recording container engine."""
    return MagicMock()


@pytest.fixture
def deploy_client() -> MagicMock:
    """Provide a recording deploy client."""
    return MagicMock()
