"""
Build pipeline orchestration.

Stages run strictly in order:

    dockerfile -> build -> release -> deploy

Requesting a stage runs every stage before it. When a prebuilt image is
given, the dockerfile and build stages are skipped for release and deploy
and the image name is used verbatim. Any failure aborts the run; nothing is
retried.
"""

import asyncio
import logging
import os
import tempfile
from dataclasses import replace
from datetime import datetime
from enum import IntEnum
from pathlib import Path
from typing import Awaitable, Callable, Mapping, Optional

from .auth import (
    RegistryTokenProvider,
    github_registry_credentials,
    registry_credentials,
)
from .config import Settings
from .deploy import PREFLIGHT_FIELDS, DeployClient, DeployConfig
from .docker import ContainerEngine, registry_host
from .exceptions import (
    ConfigurationError,
    ManifestError,
    NaisBuildError,
    SdkNotDetectedError,
)
from .git import GitMetadata, read_git_metadata
from .image_name import ImageReference, ReleaseTarget, format_image_name
from .nais_yaml import NaisYaml, detect_nais_yaml
from .sdk import SdkVariant, detect
from .tag import generate_tag

log = logging.getLogger(__name__)

DOCKERFILE_NAME = "Dockerfile"


class Stage(IntEnum):
    """Pipeline stages in execution order."""

    DOCKERFILE = 1
    BUILD = 2
    RELEASE = 3
    DEPLOY = 4


def find_manifest(settings: Settings, source_directory: Path) -> Optional[Path]:
    """Return the configured or auto-detected nais.yaml, if any.

    A configured path must exist; a failed auto-detection is not an error.
    """
    if settings.deploy.nais_yaml:
        path = source_directory / settings.deploy.nais_yaml
        if not path.is_file():
            raise ManifestError(f"configured nais.yaml not found: {path}")
        return path

    try:
        return detect_nais_yaml(source_directory)
    except ManifestError:
        log.debug(f"No nais.yaml found in {source_directory}")
        return None


class Pipeline:
    """Runs the build, release and deploy stages for one source tree."""

    def __init__(
        self,
        source_directory: Path,
        image_name: str,
        release_target: ReleaseTarget,
        sdk: Optional[SdkVariant] = None,
        image_override: bool = False,
        engine: Optional[ContainerEngine] = None,
        token_provider: Optional[Callable[[], Awaitable[str]]] = None,
        deploy_client: Optional[DeployClient] = None,
        deploy_config: Optional[DeployConfig] = None,
        manifest_path: Optional[Path] = None,
        git_metadata: Optional[GitMetadata] = None,
        git_reader: Callable[..., GitMetadata] = read_git_metadata,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self.source_directory = Path(source_directory)
        self.image_name = image_name
        self.release_target = ReleaseTarget(release_target)
        self.sdk = sdk
        self.image_override = image_override
        self.engine = engine if engine is not None else ContainerEngine()
        self.token_provider = token_provider
        self.deploy_client = (
            deploy_client if deploy_client is not None else DeployClient()
        )
        self.environ = os.environ if environ is None else environ
        self.deploy_config = (
            deploy_config
            if deploy_config is not None
            else DeployConfig.from_env(self.environ)
        )
        self.manifest_path = manifest_path
        self.git_metadata = git_metadata
        self.git_reader = git_reader

    @classmethod
    def prepare(
        cls,
        settings: Settings,
        source_directory: Path,
        stage: Stage,
        image_override: Optional[str] = None,
        wait: bool = True,
        environ: Optional[Mapping[str, str]] = None,
        now: Optional[datetime] = None,
    ) -> "Pipeline":
        """
        Resolve the SDK and image name before any stage runs.

        Raises:
            NaisBuildError: If detection, manifest parsing, version control
                or image naming fails
        """
        source_directory = Path(source_directory)
        environ = os.environ if environ is None else environ
        stage = Stage(stage)

        manifest_path = find_manifest(settings, source_directory)
        manifest = NaisYaml.parse_file(manifest_path) if manifest_path else None

        skip_build = image_override is not None and stage >= Stage.RELEASE
        sdk = None if skip_build else detect(source_directory, settings.sdk)

        git_metadata = None
        if image_override is not None:
            image_name = image_override
        else:
            git_metadata = read_git_metadata(source_directory, environ)
            image_name = cls._image_name(
                settings, source_directory, manifest, git_metadata, now
            )

        deploy_config = DeployConfig.from_env(
            environ, default_server=settings.deploy.deploy_server
        )
        deploy_config.wait = wait

        return cls(
            source_directory=source_directory,
            image_name=image_name,
            release_target=settings.release.type,
            sdk=sdk,
            image_override=image_override is not None,
            deploy_config=deploy_config,
            manifest_path=manifest_path,
            git_metadata=git_metadata,
            environ=environ,
        )

    @staticmethod
    def _image_name(
        settings: Settings,
        source_directory: Path,
        manifest: Optional[NaisYaml],
        git_metadata: GitMetadata,
        now: Optional[datetime],
    ) -> str:
        target = settings.release.type
        team = settings.team or (manifest.team if manifest else "")
        app = (manifest.app if manifest else "") or source_directory.resolve().name
        if target == ReleaseTarget.GAR and not team:
            raise ConfigurationError(
                "team is required for Google Artifact Registry releases; "
                "set it in nb.toml or nais.yaml"
            )

        tag = generate_tag(settings.build.docker.tag, git_metadata, now)
        try:
            ref = ImageReference(
                registry=settings.release.registry, team=team, app=app, tag=tag
            )
        except ValueError as e:
            raise ConfigurationError(f"image name: {e}") from e
        return format_image_name(target, ref)

    def run(self, stage: Stage, cluster: Optional[str] = None) -> Optional[str]:
        """
        Run every stage up to and including the requested one.

        Returns:
            The generated Dockerfile for the dockerfile stage, otherwise None
        """
        stage = Stage(stage)
        if stage >= Stage.RELEASE:
            self._preflight_release()
        if stage == Stage.DEPLOY:
            self._preflight_deploy(cluster)

        if self.image_override and stage >= Stage.RELEASE:
            log.info(f"Using prebuilt image {self.image_name}, skipping build")
        else:
            dockerfile = self.dockerfile()
            if stage == Stage.DOCKERFILE:
                return dockerfile
            self.build(dockerfile)

        if stage >= Stage.RELEASE:
            self.release()
        if stage >= Stage.DEPLOY:
            self.deploy(cluster)
        return None

    def dockerfile(self) -> str:
        if self.sdk is None:
            raise SdkNotDetectedError()
        return self.sdk.dockerfile()

    def build(self, dockerfile: Optional[str] = None) -> None:
        """Build the image. The generated Dockerfile is removed afterwards."""
        if dockerfile is None:
            dockerfile = self.dockerfile()

        with tempfile.TemporaryDirectory(prefix="nb-") as tmp:
            path = Path(tmp) / DOCKERFILE_NAME
            path.write_text(dockerfile, encoding="utf-8")
            self.engine.build(path, self.image_name, self.source_directory)

    def release(self) -> None:
        """
        Log in to the registry, push the image and log out again.

        Logout is attempted even if the push fails. A push failure takes
        precedence over a logout failure.
        """
        host = registry_host(self.image_name)
        token_provider = self.token_provider
        if token_provider is None:
            token_provider = RegistryTokenProvider.from_environment(self.environ).acquire
        credentials = asyncio.run(
            registry_credentials(self.release_target, token_provider, self.environ)
        )

        self.engine.login(host, credentials.username, credentials.password)
        try:
            self.engine.push(self.image_name)
        except BaseException:
            self._logout_after_failure(host)
            raise
        self.engine.logout(host)

    def _logout_after_failure(self, host: str) -> None:
        try:
            self.engine.logout(host)
        except NaisBuildError as e:
            log.error(f"Logout from {host} failed: {e}")

    def _preflight_release(self) -> None:
        if "/" not in self.image_name:
            raise ConfigurationError(
                f"image {self.image_name} has no registry part, "
                "expected registry/name:tag"
            )
        if self.release_target == ReleaseTarget.GHCR:
            github_registry_credentials(self.environ)

    def _preflight_deploy(self, cluster: Optional[str]) -> None:
        cfg = replace(self.deploy_config, cluster=cluster or "")
        cfg.validate(PREFLIGHT_FIELDS)
        if self.manifest_path is None:
            raise ManifestError(f"no nais.yaml found in {self.source_directory}")

    def deploy(self, cluster: str) -> None:
        if self.manifest_path is None:
            raise ManifestError(f"no nais.yaml found in {self.source_directory}")

        metadata = self.git_metadata or self.git_reader(
            self.source_directory, self.environ
        )
        cfg = replace(
            self.deploy_config,
            cluster=cluster,
            owner=metadata.owner,
            repository=metadata.repository,
            git_ref=metadata.commit,
            resources=[str(self.manifest_path)],
            variables={**self.deploy_config.variables, "image": self.image_name},
        )
        self.deploy_client.deploy(cfg)
