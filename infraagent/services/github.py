"""GitHub Actions repository secrets via the REST API.

Secret values are sealed locally for the repository's published public key;
only the sealed blob and the key's ``key_id`` are sent.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from infraagent.exceptions import ExternalServiceError, SecretsError, ValidationError
from infraagent.secrets.sealing import seal

log = structlog.get_logger(__name__)

SECRET_NAME_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


@dataclass(frozen=True)
class RepoPublicKey:
    """A repository's secrets public key as published by GitHub."""

    key_id: str
    key: str


def validate_secret_name(name: str) -> None:
    """Check a name against GitHub's secret naming rules.

    Raises:
        ValidationError: If the name is not allowed
    """
    if not SECRET_NAME_PATTERN.fullmatch(name or ""):
        raise ValidationError(
            f"Invalid secret name {name!r}: use letters, digits and underscores, not starting with a digit"
        )
    if name.upper().startswith("GITHUB_"):
        raise ValidationError(f"Invalid secret name {name!r}: names must not start with GITHUB_")


class GitHubSecretsClient:
    """Store repository secrets on GitHub.

    Example:
        >>> with GitHubSecretsClient(token) as github:
        ...     github.put_repo_secret("octo", "app", "STRIPE_SECRET_KEY", "sk_live_...")
    """

    def __init__(
        self,
        token: str,
        base_url: str = "https://api.github.com",
        client: httpx.Client | None = None,
        timeout: float = 30.0,
    ) -> None:
        """Initialize GitHub client.

        Args:
            token: GitHub personal access token
            base_url: GitHub API base URL (for GitHub Enterprise)
            client: Optional preconfigured httpx client
            timeout: Request timeout in seconds when creating a client
        """
        self.token = token.strip() if token else token
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def __enter__(self) -> "GitHubSecretsClient":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        url = f"{self.base_url}{path}"
        try:
            response = self._client.request(method, url, headers=self.headers, **kwargs)
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"GitHub request failed: {method} {path}: {e}") from e

        if response.status_code >= 400:
            raise ExternalServiceError(
                f"GitHub API error: {method} {path}",
                status_code=response.status_code,
                response_text=response.text[:500],
            )
        return response

    def get_authenticated_user(self) -> str:
        """Login of the token's owner."""
        return self._request("GET", "/user").json()["login"]

    def get_repo_public_key(self, owner: str, repo: str) -> RepoPublicKey:
        """Fetch the public key used to seal secrets for ``owner/repo``."""
        data = self._request("GET", f"/repos/{owner}/{repo}/actions/secrets/public-key").json()
        try:
            return RepoPublicKey(key_id=data["key_id"], key=data["key"])
        except (KeyError, TypeError) as e:
            raise ExternalServiceError("GitHub returned a malformed repository public key") from e

    def put_repo_secret(
        self,
        owner: str,
        repo: str,
        name: str,
        value: str,
        public_key: RepoPublicKey | None = None,
    ) -> None:
        """Seal ``value`` and create or update the repository secret ``name``.

        Raises:
            ValidationError: If the name or value is invalid
            EncryptionError: If the repository public key is malformed
            ExternalServiceError: If GitHub rejects the request
        """
        validate_secret_name(name)
        public_key = public_key or self.get_repo_public_key(owner, repo)

        encrypted_value = seal(value, public_key.key)
        self._request(
            "PUT",
            f"/repos/{owner}/{repo}/actions/secrets/{name}",
            json={"encrypted_value": encrypted_value, "key_id": public_key.key_id},
        )
        log.info("repo_secret_stored", repository=f"{owner}/{repo}", name=name)

    def add_secrets(self, owner: str, repo: str, secrets: Mapping[str, str]) -> list[str]:
        """Store several secrets, continuing past individual failures.

        Returns:
            Names of the secrets that were stored
        """
        public_key = self.get_repo_public_key(owner, repo)
        stored: list[str] = []

        for name, value in secrets.items():
            try:
                self.put_repo_secret(owner, repo, name, value, public_key=public_key)
            except (SecretsError, ExternalServiceError) as e:
                log.error("repo_secret_failed", repository=f"{owner}/{repo}", name=name, error=e.message)
                continue
            stored.append(name)

        return stored
