"""Token verification against each platform's REST API.

Every verifier takes the stored credential and returns the account name the
token authenticates as, or raises ``ExternalServiceError``.
"""

from collections.abc import Mapping
from functools import partial
from typing import Any

import httpx
import structlog

from infraagent.exceptions import ExternalServiceError, ValidationError
from infraagent.secrets.health import Verifier
from infraagent.secrets.validators import SecretValue

log = structlog.get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
VERCEL_API_URL = "https://api.vercel.com"
SUPABASE_API_URL = "https://api.supabase.com"
CLOUDFLARE_API_URL = "https://api.cloudflare.com/client/v4"
STRIPE_API_URL = "https://api.stripe.com"


def _token(credential: SecretValue, service: str, field: str) -> str:
    """Plain tokens are used as-is; structured credentials must carry ``field``."""
    if isinstance(credential, Mapping):
        value = credential.get(field)
        if not value:
            raise ValidationError(f"Stored {service} credentials have no {field!r} field")
        return value
    return credential


def _get_json(
    client: httpx.Client,
    service: str,
    url: str,
    headers: dict[str, str] | None = None,
    auth: tuple[str, str] | None = None,
) -> Any:
    log.debug("verify_request", service=service, url=url)
    try:
        response = client.get(url, headers=headers, auth=auth)
    except httpx.HTTPError as e:
        raise ExternalServiceError(f"Could not reach {service}: {e}") from e

    if response.status_code >= 400:
        raise ExternalServiceError(
            f"{service} rejected the token",
            status_code=response.status_code,
            response_text=response.text[:500],
        )

    try:
        return response.json()
    except ValueError as e:
        raise ExternalServiceError(f"{service} returned an invalid response") from e


# Raised when a 2xx body lacks the fields a verifier reads
PAYLOAD_ERRORS = (KeyError, TypeError, IndexError, AttributeError)


def _unexpected(service: str, error: Exception) -> ExternalServiceError:
    log.warning("verify_unexpected_response", service=service, error=repr(error))
    return ExternalServiceError(f"{service} returned an unexpected response")


def verify_github(credential: SecretValue, client: httpx.Client, base_url: str = GITHUB_API_URL) -> str:
    data = _get_json(
        client,
        "github",
        f"{base_url.rstrip('/')}/user",
        headers={
            "Authorization": f"Bearer {_token(credential, 'github', 'token')}",
            "Accept": "application/vnd.github+json",
        },
    )
    try:
        return data["login"]
    except PAYLOAD_ERRORS as e:
        raise _unexpected("github", e) from e


def verify_vercel(credential: SecretValue, client: httpx.Client) -> str:
    data = _get_json(
        client,
        "vercel",
        f"{VERCEL_API_URL}/v2/user",
        headers={"Authorization": f"Bearer {_token(credential, 'vercel', 'token')}"},
    )
    try:
        return data["user"]["username"]
    except PAYLOAD_ERRORS as e:
        raise _unexpected("vercel", e) from e


def verify_supabase(credential: SecretValue, client: httpx.Client) -> str:
    projects = _get_json(
        client,
        "supabase",
        f"{SUPABASE_API_URL}/v1/projects",
        headers={"Authorization": f"Bearer {_token(credential, 'supabase', 'accessToken')}"},
    )
    if not isinstance(projects, list):
        raise _unexpected("supabase", TypeError(f"expected a list, got {type(projects).__name__}"))
    if not projects:
        return "account with no projects"
    try:
        return projects[0].get("name", projects[0].get("id", "unknown project"))
    except PAYLOAD_ERRORS as e:
        raise _unexpected("supabase", e) from e


def verify_cloudflare(credential: SecretValue, client: httpx.Client) -> str:
    data = _get_json(
        client,
        "cloudflare",
        f"{CLOUDFLARE_API_URL}/user/tokens/verify",
        headers={"Authorization": f"Bearer {_token(credential, 'cloudflare', 'token')}"},
    )
    try:
        result = data.get("result") or {}
        status = result.get("status")
        token_id = result.get("id", "unknown")
        success = data.get("success")
    except PAYLOAD_ERRORS as e:
        raise _unexpected("cloudflare", e) from e

    if not success or status != "active":
        raise ExternalServiceError(f"cloudflare token is not active (status: {status})")
    return f"token {token_id}"


def verify_stripe(credential: SecretValue, client: httpx.Client) -> str:
    data = _get_json(
        client,
        "stripe",
        f"{STRIPE_API_URL}/v1/account",
        auth=(_token(credential, "stripe", "secretKey"), ""),
    )
    try:
        profile = data.get("business_profile") or {}
        return profile.get("name") or data["id"]
    except PAYLOAD_ERRORS as e:
        raise _unexpected("stripe", e) from e


def build_verifiers(client: httpx.Client, github_api_url: str = GITHUB_API_URL) -> dict[str, Verifier]:
    """Verifiers for every supported service, sharing one HTTP client."""
    return {
        "github": partial(verify_github, client=client, base_url=github_api_url),
        "vercel": partial(verify_vercel, client=client),
        "supabase": partial(verify_supabase, client=client),
        "cloudflare": partial(verify_cloudflare, client=client),
        "stripe": partial(verify_stripe, client=client),
    }
