"""Platform REST clients used by the credential commands."""

from infraagent.services.github import GitHubSecretsClient, RepoPublicKey
from infraagent.services.verifiers import build_verifiers

__all__ = ["GitHubSecretsClient", "RepoPublicKey", "build_verifiers"]
