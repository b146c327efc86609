"""Caller-facing credential functions.

Thin functions over ``VaultStore`` and the sealing module for the CLI and
orchestration layers. Plain strings in, plain strings (or errors) out.
"""

from collections.abc import Mapping

from infraagent.secrets import sealing
from infraagent.secrets.validators import SecretValue
from infraagent.secrets.vault import SecretsRecord, VaultContext, VaultStore


def get_secrets(context: VaultContext) -> SecretsRecord:
    """Return all stored credentials by service."""
    return VaultStore(context).load()


def save_secret(context: VaultContext, service: str, token: SecretValue) -> None:
    """Validate and store the credential for ``service``."""
    VaultStore(context).set_secret(service, token)


def remove_secret(context: VaultContext, service: str) -> bool:
    """Remove the credential for ``service``; True if one was stored."""
    return VaultStore(context).remove_secret(service)


def seal(plaintext: str, recipient_public_key: str) -> str:
    """Seal ``plaintext`` for the holder of ``recipient_public_key``."""
    return sealing.seal(plaintext, recipient_public_key)


def credential_value(token: SecretValue, field: str | None = None) -> str:
    """Pick a single string out of a stored credential.

    Structured credentials need ``field``; plain tokens ignore it.

    Raises:
        KeyError: If ``field`` is missing from a structured credential
    """
    if isinstance(token, Mapping):
        if field is None:
            raise KeyError("field is required for structured credentials")
        return token[field]
    return token
