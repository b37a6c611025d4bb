"""Version control metadata from git."""

import logging
import os
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Tuple

from .exceptions import VersionControlError

log = logging.getLogger(__name__)

GIT_TIMEOUT_SECONDS = 10

# git@github.com:owner/repo.git, https://github.com/owner/repo(.git), ssh://git@host/owner/repo
REMOTE_URL_PATTERN = re.compile(r"[:/](?P<owner>[^/:]+)/(?P<repository>[^/]+?)(?:\.git)?/?$")


@dataclass(frozen=True)
class GitMetadata:
    commit: str
    short_commit: str
    dirty: bool
    owner: str = ""
    repository: str = ""


def _git(args: list, cwd: Path, check: bool = True) -> subprocess.CompletedProcess:
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=GIT_TIMEOUT_SECONDS,
        )
    except FileNotFoundError as e:
        raise VersionControlError("git is not installed or not in PATH") from e
    except subprocess.TimeoutExpired as e:
        raise VersionControlError(f"{' '.join(cmd)} timed out") from e

    if check and result.returncode != 0:
        raise VersionControlError(
            f"{' '.join(cmd)} failed with exit code {result.returncode}: "
            f"{result.stderr.strip()}"
        )
    return result


def parse_remote_url(url: str) -> Tuple[str, str]:
    """Extract (owner, repository) from a git remote URL.

    Returns empty strings if the URL is not recognised.
    """
    match = REMOTE_URL_PATTERN.search(url.strip())
    if not match:
        return "", ""
    return match.group("owner"), match.group("repository")


def _owner_and_repository(
    source_directory: Path, environ: Mapping[str, str]
) -> Tuple[str, str]:
    github_repository = environ.get("GITHUB_REPOSITORY", "")
    if "/" in github_repository:
        owner, _, repository = github_repository.partition("/")
        return owner, repository

    result = _git(["remote", "get-url", "origin"], source_directory, check=False)
    if result.returncode != 0:
        log.debug("No origin remote configured, repository owner/name unknown")
        return "", ""
    return parse_remote_url(result.stdout)


def read_git_metadata(
    source_directory: Path, environ: Optional[Mapping[str, str]] = None
) -> GitMetadata:
    """Read commit, dirty flag and repository owner/name.

    Raises:
        VersionControlError: If git fails or the directory is not a git work tree
    """
    environ = os.environ if environ is None else environ
    source_directory = Path(source_directory)

    commit = _git(["rev-parse", "HEAD"], source_directory).stdout.strip()
    short_commit = _git(["rev-parse", "--short", "HEAD"], source_directory).stdout.strip()
    status = _git(["status", "--porcelain"], source_directory).stdout
    owner, repository = _owner_and_repository(source_directory, environ)

    return GitMetadata(
        commit=commit,
        short_commit=short_commit,
        dirty=bool(status.strip()),
        owner=owner,
        repository=repository,
    )
