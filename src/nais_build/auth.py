"""
Registry credentials.

Google Artifact Registry access tokens are obtained in one of two ways:

- Federated: in GitHub Actions, a GitHub OIDC identity token is requested
  for the workload identity pool and exchanged at Google STS for a
  short-lived access token. Selected only when WORKLOAD_IDENTITY_POOL,
  ACTIONS_ID_TOKEN_REQUEST_URL and ACTIONS_ID_TOKEN_REQUEST_TOKEN are all set.
- Ambient: otherwise, application default credentials of the host are used
  (service account file, gcloud login or attached identity).

Tokens are fetched fresh for every run and never cached.
"""

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Awaitable, Callable, Mapping, Optional

import google.auth
import google.auth.exceptions
import google.auth.transport.requests
import httpx

from .exceptions import (
    ConfigurationError,
    CredentialsError,
    TokenDecodeError,
    TransportError,
)
from .image_name import ReleaseTarget

log = logging.getLogger(__name__)

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"
STS_TOKEN_URL = "https://sts.googleapis.com/v1/token"
HTTP_TIMEOUT_SECONDS = 3.0

GRANT_TYPE_TOKEN_EXCHANGE = "urn:ietf:params:oauth:grant-type:token-exchange"
TOKEN_TYPE_ACCESS_TOKEN = "urn:ietf:params:oauth:token-type:access_token"
TOKEN_TYPE_JWT = "urn:ietf:params:oauth:token-type:jwt"

ENV_IDENTITY_POOL = "WORKLOAD_IDENTITY_POOL"
ENV_OIDC_TOKEN_URL = "ACTIONS_ID_TOKEN_REQUEST_URL"
ENV_OIDC_BEARER_TOKEN = "ACTIONS_ID_TOKEN_REQUEST_TOKEN"

# Docker login username for OAuth2 access tokens on Google registries
GAR_USERNAME = "oauth2accesstoken"

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class FederationContext:
    """Ambient signals of a CI identity able to use workload identity federation."""

    identity_pool: str
    oidc_token_url: str
    oidc_bearer_token: str


@dataclass(frozen=True)
class RegistryCredentials:
    username: str
    password: str

    def __repr__(self) -> str:
        return f"RegistryCredentials(username={self.username!r}, password=***)"


def read_federation_context(
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[FederationContext]:
    """Read the federation signals from the environment.

    Returns None unless all three signals are present and non-empty.
    """
    environ = os.environ if environ is None else environ
    identity_pool = environ.get(ENV_IDENTITY_POOL)
    oidc_token_url = environ.get(ENV_OIDC_TOKEN_URL)
    oidc_bearer_token = environ.get(ENV_OIDC_BEARER_TOKEN)

    if identity_pool and oidc_token_url and oidc_bearer_token:
        return FederationContext(
            identity_pool=identity_pool,
            oidc_token_url=oidc_token_url,
            oidc_bearer_token=oidc_bearer_token,
        )
    return None


def normalize_bearer_token(token: str) -> str:
    """Strip a leading "Bearer " from a token, otherwise return it unchanged."""
    if token.startswith(BEARER_PREFIX):
        return token[len(BEARER_PREFIX):]
    return token


async def _request_json_field(
    client: httpx.AsyncClient, request: httpx.Request, url: str, field: str
) -> str:
    """Send a request and return one string field of its JSON response body.

    Raises:
        TransportError: On timeout, connection failure or non-2xx status
        TokenDecodeError: If the body is not JSON or lacks the field
    """
    try:
        response = await client.send(request)
    except httpx.TimeoutException as e:
        raise TransportError(
            f"request timed out after {HTTP_TIMEOUT_SECONDS:g}s", url
        ) from e
    except httpx.HTTPError as e:
        raise TransportError(f"request failed ({e})", url) from e

    body = response.text
    if not response.is_success:
        raise TransportError("unexpected response", url, response.status_code, body)

    try:
        value = response.json()[field]
    except (ValueError, KeyError, TypeError) as e:
        raise TokenDecodeError("decode response", url, response.status_code, body) from e

    if not isinstance(value, str):
        raise TokenDecodeError("decode response", url, response.status_code, body)
    return value


async def fetch_oidc_token(client: httpx.AsyncClient, ctx: FederationContext) -> str:
    """Request a CI identity token with the workload identity pool as audience."""
    log.debug("Requesting OIDC identity token from CI provider")
    request = client.build_request(
        "GET",
        ctx.oidc_token_url,
        params={"audience": f"https://iam.googleapis.com/{ctx.identity_pool}"},
        headers={"Authorization": f"Bearer {ctx.oidc_bearer_token}"},
        timeout=HTTP_TIMEOUT_SECONDS,
    )
    return await _request_json_field(client, request, ctx.oidc_token_url, "value")


async def exchange_federated_token(
    client: httpx.AsyncClient, identity_pool: str, id_token: str
) -> str:
    """Exchange an identity token for a Google access token at STS."""
    log.debug("Exchanging federated identity token for an oauth2 token")
    payload = {
        "grantType": GRANT_TYPE_TOKEN_EXCHANGE,
        "audience": f"//iam.googleapis.com/{identity_pool}",
        "scope": CLOUD_PLATFORM_SCOPE,
        "requestedTokenType": TOKEN_TYPE_ACCESS_TOKEN,
        "subjectToken": id_token,
        "subjectTokenType": TOKEN_TYPE_JWT,
    }
    request = client.build_request(
        "POST", STS_TOKEN_URL, json=payload, timeout=HTTP_TIMEOUT_SECONDS
    )
    return await _request_json_field(client, request, STS_TOKEN_URL, "access_token")


def _default_credentials_token() -> str:
    try:
        credentials, _ = google.auth.default(scopes=[CLOUD_PLATFORM_SCOPE])
        credentials.refresh(google.auth.transport.requests.Request())
    except google.auth.exceptions.GoogleAuthError as e:
        raise CredentialsError(f"default credentials: {e}") from e

    if not credentials.token:
        raise CredentialsError("default credentials did not produce an access token")
    return normalize_bearer_token(credentials.token)


async def default_credentials_token() -> str:
    """Get an access token from application default credentials."""
    log.debug("Exchanging Google default credentials for an oauth2 token")
    return await asyncio.to_thread(_default_credentials_token)


def _default_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=httpx.Timeout(HTTP_TIMEOUT_SECONDS))


class RegistryTokenProvider:
    """Produces a registry access token for a fixed federation context.

    The context is read once; everything after that depends only on it.
    """

    def __init__(
        self,
        context: Optional[FederationContext],
        client_factory: Callable[[], httpx.AsyncClient] = _default_client,
    ):
        self.context = context
        self.client_factory = client_factory

    @classmethod
    def from_environment(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "RegistryTokenProvider":
        return cls(read_federation_context(environ))

    @property
    def federated(self) -> bool:
        return self.context is not None

    async def acquire(self) -> str:
        """
        Acquire an access token. Nothing is retried.

        Raises:
            TransportError: If a federation HTTP call fails
            CredentialsError: If default credentials are unavailable
        """
        if self.context is None:
            return await default_credentials_token()

        async with self.client_factory() as client:
            id_token = await fetch_oidc_token(client, self.context)
            return await exchange_federated_token(
                client, self.context.identity_pool, id_token
            )


def github_registry_credentials(
    environ: Optional[Mapping[str, str]] = None,
) -> RegistryCredentials:
    """Credentials for GitHub Container Registry from the Actions environment.

    Raises:
        ConfigurationError: If GITHUB_ACTOR or GITHUB_TOKEN is missing
    """
    environ = os.environ if environ is None else environ
    username = environ.get("GITHUB_ACTOR", "")
    password = environ.get("GITHUB_TOKEN", "")
    missing = [
        name
        for name, value in (("GITHUB_ACTOR", username), ("GITHUB_TOKEN", password))
        if not value
    ]
    if missing:
        raise ConfigurationError(
            f"release configuration is incomplete, missing: {', '.join(missing)}"
        )
    return RegistryCredentials(username=username, password=password)


async def registry_credentials(
    target: ReleaseTarget,
    token_provider: Callable[[], Awaitable[str]],
    environ: Optional[Mapping[str, str]] = None,
) -> RegistryCredentials:
    """Resolve docker login credentials for a release target."""
    if target == ReleaseTarget.GHCR:
        return github_registry_credentials(environ)

    token = await token_provider()
    return RegistryCredentials(
        username=GAR_USERNAME, password=normalize_bearer_token(token)
    )
