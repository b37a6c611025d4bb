"""Deploy requests delegated to the external nais deploy client."""

import logging
import os
import subprocess
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .docker import COMMAND_NOT_FOUND
from .exceptions import ConfigurationError, DeployFailedError

log = logging.getLogger(__name__)

# Fields the deploy client cannot run without
REQUIRED_FIELDS = (
    "apikey",
    "cluster",
    "deploy_server",
    "owner",
    "repository",
    "git_ref",
    "resources",
)

# Fields known before any pipeline stage runs
PREFLIGHT_FIELDS = ("apikey", "deploy_server", "cluster")


@dataclass
class DeployConfig:
    """A deploy request. Field names correspond to deploy client flags."""

    apikey: str = ""
    cluster: str = ""
    deploy_server: str = ""
    owner: str = ""
    git_ref: str = ""
    repository: str = ""
    resources: List[str] = field(default_factory=list)
    variables: Dict[str, str] = field(default_factory=dict)
    vars_file: str = ""
    wait: bool = True

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None, default_server: str = ""
    ) -> "DeployConfig":
        """Read credentials and server address from the environment.

        Missing values are left empty; use validate() before deploying.
        """
        environ = os.environ if environ is None else environ
        return cls(
            apikey=environ.get("NAIS_DEPLOY_APIKEY", ""),
            deploy_server=environ.get("NAIS_DEPLOY_SERVER", "") or default_server,
        )

    def missing_fields(self, required: Sequence[str] = REQUIRED_FIELDS) -> List[str]:
        return [name for name in required if not getattr(self, name)]

    def validate(self, required: Sequence[str] = REQUIRED_FIELDS) -> None:
        """
        Raises:
            ConfigurationError: Listing every missing field
        """
        missing = self.missing_fields(required)
        if missing:
            raise ConfigurationError(
                f"deploy configuration is incomplete, missing: {', '.join(missing)}"
            )

    def to_args(self) -> List[str]:
        args: List[str] = []
        for resource in self.resources:
            args += ["--resource", resource]
        for key, value in self.variables.items():
            args += ["--var", f"{key}={value}"]
        if self.vars_file:
            args += ["--vars", self.vars_file]

        args += [
            "--apikey", self.apikey,
            "--cluster", self.cluster,
            "--deploy-server", self.deploy_server,
            "--owner", self.owner,
            "--ref", self.git_ref,
            "--repository", self.repository,
            "--wait", str(self.wait).lower(),
        ]
        return args


class DeployClient:
    """Runs the external deploy client."""

    def __init__(self, binary: str = "deploy"):
        self.binary = binary

    def deploy(self, cfg: DeployConfig) -> None:
        """
        Validate the request and run the deploy client.

        The client is never started with an incomplete request.

        Raises:
            ConfigurationError: If required fields are missing
            DeployFailedError: If the client exits with a non-zero status
        """
        cfg.validate()
        log.info(f"Deploying {', '.join(cfg.resources)} to {cfg.cluster}")

        operation = self.binary
        try:
            result = subprocess.run([self.binary, *cfg.to_args()])
        except FileNotFoundError as e:
            log.error(f"{self.binary} is not installed or not in PATH")
            raise DeployFailedError(operation, COMMAND_NOT_FOUND) from e

        if result.returncode != 0:
            raise DeployFailedError(operation, result.returncode)
