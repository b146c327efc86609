"""Vault key derivation from the local identity.

The vault key is never stored. It is re-derived on every run from the
(username, hostname) pair and a random per-installation salt kept next to
the vault, using scrypt so offline guessing of the identity stays expensive.
"""

import getpass
import secrets
import socket
from dataclasses import dataclass
from pathlib import Path

import structlog
from cryptography.hazmat.primitives.kdf.scrypt import Scrypt

from infraagent.exceptions import ConfigurationError, SecretsError

log = structlog.get_logger(__name__)

KEY_SIZE = 32
SALT_SIZE = 16


@dataclass(frozen=True)
class Identity:
    """The local (username, hostname) pair the vault key is bound to."""

    username: str
    hostname: str

    def to_bytes(self) -> bytes:
        # NUL never occurs in a username or hostname (resolve_identity rejects it)
        return f"{self.username}\x00{self.hostname}".encode()


@dataclass(frozen=True)
class KdfParams:
    """scrypt cost parameters."""

    n: int = 2**14
    r: int = 8
    p: int = 1


def resolve_identity() -> Identity:
    """Read the current username and hostname.

    Raises:
        ConfigurationError: If either component cannot be determined
    """
    try:
        username = getpass.getuser()
    except (KeyError, OSError, ImportError) as e:
        raise ConfigurationError("Cannot determine the current username for vault key derivation") from e

    hostname = socket.gethostname()

    if not username or not username.strip():
        raise ConfigurationError("Cannot determine the current username for vault key derivation")
    if not hostname or not hostname.strip():
        raise ConfigurationError("Cannot determine the hostname for vault key derivation")
    if "\x00" in username or "\x00" in hostname:
        raise ConfigurationError("Username and hostname must not contain NUL characters")

    return Identity(username=username, hostname=hostname)


def derive_key(identity: Identity, salt: bytes, params: KdfParams | None = None) -> bytes:
    """Derive the 256-bit vault key.

    Deterministic: the same identity, salt and parameters always give the
    same key.

    Args:
        identity: Local identity the key is bound to
        salt: Per-installation salt
        params: scrypt cost parameters (defaults to ``KdfParams()``)

    Returns:
        32-byte key
    """
    params = params or KdfParams()
    kdf = Scrypt(salt=salt, length=KEY_SIZE, n=params.n, r=params.r, p=params.p)
    return kdf.derive(identity.to_bytes())


def load_salt(salt_file: Path) -> bytes | None:
    """Read the installation salt, or None if it has not been created yet.

    Raises:
        SecretsError: If the file cannot be read or has the wrong size
    """
    try:
        salt = salt_file.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        raise SecretsError(f"Failed to read salt file {salt_file}", cause=e) from e

    if len(salt) != SALT_SIZE:
        raise SecretsError(
            f"Salt file {salt_file} is {len(salt)} bytes, expected {SALT_SIZE}",
            suggestion="Restore the salt file from backup, or delete the vault and reconfigure",
        )
    return salt


def create_salt(salt_file: Path) -> bytes:
    """Generate and persist a new installation salt with owner-only permissions.

    Raises:
        SecretsError: If the salt cannot be written
    """
    salt = secrets.token_bytes(SALT_SIZE)
    try:
        salt_file.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        with open(salt_file, "wb") as f:
            f.write(salt)
        salt_file.chmod(0o600)
    except OSError as e:
        raise SecretsError(f"Failed to write salt file {salt_file}", cause=e) from e

    log.debug("salt_created", path=str(salt_file))
    return salt


def load_or_create_salt(salt_file: Path) -> bytes:
    """Return the installation salt, creating it on first use."""
    salt = load_salt(salt_file)
    if salt is None:
        salt = create_salt(salt_file)
    return salt
