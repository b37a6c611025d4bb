"""Container engine operations (docker build, login, logout, push)."""

import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Type

from .exceptions import (
    BuildFailedError,
    LoginFailedError,
    LogoutFailedError,
    ProcessError,
    PushFailedError,
)

log = logging.getLogger(__name__)

# Exit status reported when the engine executable cannot be started
COMMAND_NOT_FOUND = 127


def registry_host(image: str) -> str:
    """Return the registry host of an image name, e.g. ghcr.io for ghcr.io/org/app:1."""
    return image.split("/", 1)[0]


class ContainerEngine:
    """Drives an external container engine CLI.

    Output of the engine is streamed to the terminal, not captured. A
    non-zero exit status raises the ProcessError subclass of the operation.
    """

    def __init__(self, binary: str = "docker"):
        self.binary = binary

    def _run(
        self,
        args: List[str],
        error_class: Type[ProcessError],
        input: Optional[str] = None,
    ) -> None:
        cmd = [self.binary, *args]
        operation = f"{self.binary} {args[0]}"
        log.debug(f"Executing: {operation}")
        try:
            result = subprocess.run(cmd, input=input, text=True)
        except FileNotFoundError as e:
            log.error(f"{self.binary} is not installed or not in PATH")
            raise error_class(operation, COMMAND_NOT_FOUND) from e

        if result.returncode != 0:
            raise error_class(operation, result.returncode)

    def build(self, dockerfile: Path, tag: str, context: Path) -> None:
        log.info(f"Building image {tag}")
        self._run(
            ["build", "--file", str(dockerfile), "--tag", tag, str(context)],
            BuildFailedError,
        )

    def login(self, registry: str, username: str, password: str) -> None:
        log.debug(f"Logging in to Docker registry {registry}")
        self._run(
            ["login", registry, "--username", username, "--password-stdin"],
            LoginFailedError,
            input=password,
        )

    def logout(self, registry: str) -> None:
        log.debug(f"Logging out of Docker registry {registry}")
        self._run(["logout", registry], LogoutFailedError)

    def push(self, image: str) -> None:
        log.info(f"Pushing image {image}")
        self._run(["push", image], PushFailedError)
