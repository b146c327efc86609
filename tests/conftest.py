"""Pytest configuration and shared fixtures."""

from datetime import UTC, datetime
from pathlib import Path

import pytest
import structlog
from nacl.public import PrivateKey

from infraagent.secrets.kdf import Identity, KdfParams
from infraagent.secrets.vault import VaultContext, VaultStore

# Cheap scrypt parameters so tests stay fast
FAST_KDF = KdfParams(n=2**10, r=8, p=1)


@pytest.fixture
def identity() -> Identity:
    """Fixed local identity."""
    return Identity(username="alice", hostname="devbox")


@pytest.fixture
def fixed_clock():
    """Clock that always returns the same instant."""
    instant = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)
    return lambda: instant


@pytest.fixture
def vault_dir(tmp_path: Path) -> Path:
    """Temporary vault directory."""
    return tmp_path / ".infraagent"


@pytest.fixture
def vault_context(vault_dir: Path, identity: Identity, fixed_clock) -> VaultContext:
    """Isolated vault context with cheap key derivation."""
    return VaultContext(directory=vault_dir, identity=identity, kdf=FAST_KDF, clock=fixed_clock)


@pytest.fixture
def store(vault_context: VaultContext) -> VaultStore:
    """VaultStore over the isolated context."""
    return VaultStore(vault_context)


@pytest.fixture
def fresh_context(vault_dir: Path, identity: Identity):
    """Factory for new contexts over the same directory (simulates a process restart)."""

    def _make() -> VaultContext:
        return VaultContext(directory=vault_dir, identity=identity, kdf=FAST_KDF)

    return _make


@pytest.fixture
def recipient_key() -> PrivateKey:
    """Recipient X25519 key pair, as a platform would hold it."""
    return PrivateKey.generate()


@pytest.fixture
def cli_home(tmp_path: Path, monkeypatch) -> Path:
    """Point the CLI at a temporary home with cheap key derivation."""
    home = tmp_path / "home"
    monkeypatch.setenv("INFRAAGENT_HOME", str(home))
    monkeypatch.setenv("INFRAAGENT_KDF__N", "1024")
    monkeypatch.setenv("INFRAAGENT_LOG_LEVEL", "WARNING")
    return home


@pytest.fixture
def cli_store(cli_home: Path) -> VaultStore:
    """VaultStore over the CLI home, keyed to the real local identity like the CLI."""
    return VaultStore(VaultContext(directory=cli_home, kdf=FAST_KDF))


@pytest.fixture(autouse=True)
def reset_structlog():
    """Undo global logging configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()
