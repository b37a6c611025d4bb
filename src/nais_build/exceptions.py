"""Custom exceptions for nais_build.

Every failure surfaced to the operator is a NaisBuildError. Lower level
errors (filesystem, HTTP, subprocess) are wrapped at the component boundary
so the original status code, response body or exit status is preserved.
"""

from typing import Optional


class NaisBuildError(Exception):
    """Base exception for all reported nais_build failures."""

    pass


class DetectionError(NaisBuildError):
    """Raised when SDK detection hits an unexpected filesystem error."""

    pass


class SdkNotDetectedError(DetectionError):
    """Raised when no known SDK matches the source directory."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "no compatible SDKs for this source directory")


class BuildTargetError(NaisBuildError):
    """Raised when build targets cannot be discovered."""

    pass


class EmptyFilenameError(BuildTargetError):
    """Raised when a build target name cannot be represented as text."""

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or "target name is empty or not valid text")


class TransportError(NaisBuildError):
    """Raised when an HTTP request fails, times out or returns a bad response.

    Attributes:
        url: Endpoint that was called
        status_code: HTTP status, or None if no response was received
        body: Raw response body, or None if no response was received
    """

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ):
        self.url = url
        self.status_code = status_code
        self.body = body
        if status_code is not None:
            message = f"{message}: {url}: code: {status_code}, body: {body}"
        else:
            message = f"{message}: {url}"
        super().__init__(message)


class TokenDecodeError(TransportError):
    """Raised when a token endpoint returns a body that cannot be decoded."""

    pass


class CredentialsError(NaisBuildError):
    """Raised when ambient default credentials are missing or cannot be refreshed."""

    pass


class ProcessError(NaisBuildError):
    """Raised when an external process exits with a non-zero status.

    Attributes:
        command: Name of the operation that failed, e.g. "docker push"
        returncode: Exit status of the process
    """

    def __init__(self, command: str, returncode: int):
        self.command = command
        self.returncode = returncode
        super().__init__(f"{command} failed with exit code {returncode}")


class BuildFailedError(ProcessError):
    """Raised when the container engine build fails."""

    pass


class LoginFailedError(ProcessError):
    """Raised when registry login fails."""

    pass


class LogoutFailedError(ProcessError):
    """Raised when registry logout fails."""

    pass


class PushFailedError(ProcessError):
    """Raised when pushing the image fails."""

    pass


class DeployFailedError(ProcessError):
    """Raised when the deploy client fails."""

    pass


class ConfigurationError(NaisBuildError):
    """Raised when configuration is invalid or missing required fields."""

    pass


class ManifestError(NaisBuildError):
    """Raised when the application manifest cannot be found or parsed."""

    pass


class VersionControlError(NaisBuildError):
    """Raised when version control metadata cannot be read."""

    pass
