"""Local credential vault and secret sealing.

Modules:
    kdf: vault key derivation from the local identity
    validators: token shape validation
    vault: encrypted vault with backup and recovery
    sealing: sealed-box encryption for remote secret stores
    health: sequential remote verification of stored credentials
    api: caller-facing functions
    envfile: dotenv export of stored credentials
"""

from infraagent.exceptions import (
    ConfigurationError,
    EncryptionError,
    SecretsError,
    ValidationError,
    VaultCorruptedError,
)
from infraagent.secrets.api import get_secrets, remove_secret, save_secret, seal
from infraagent.secrets.envfile import render_env, write_env_files
from infraagent.secrets.health import ServiceCheck, check_services
from infraagent.secrets.kdf import Identity, KdfParams, derive_key, resolve_identity
from infraagent.secrets.sealing import unseal
from infraagent.secrets.validators import TokenValidator, validate_token
from infraagent.secrets.vault import SaveTransaction, SecretsRecord, VaultContext, VaultState, VaultStore

__all__ = [
    "ConfigurationError",
    "EncryptionError",
    "Identity",
    "KdfParams",
    "SaveTransaction",
    "SecretsError",
    "SecretsRecord",
    "ServiceCheck",
    "TokenValidator",
    "ValidationError",
    "VaultContext",
    "VaultCorruptedError",
    "VaultState",
    "VaultStore",
    "check_services",
    "derive_key",
    "get_secrets",
    "remove_secret",
    "render_env",
    "resolve_identity",
    "save_secret",
    "seal",
    "unseal",
    "validate_token",
    "write_env_files",
]
