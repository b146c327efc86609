"""Sealed-box encryption of secrets for a remote platform's public key.

Produces libsodium ``crypto_box_seal`` output, the format GitHub's
"create or update a repository secret" API expects:

    base64( ephemeral_public_key[32] || XSalsa20-Poly1305(ciphertext || tag[16]) )

A fresh ephemeral X25519 key pair is generated for every call and discarded
afterwards, so the sender keeps no identity. The per-message key comes from
the X25519 shared secret, and the Poly1305 tag lets the recipient reject
tampered blobs.
"""

import base64
import binascii

from nacl.exceptions import CryptoError
from nacl.exceptions import TypeError as NaclTypeError
from nacl.exceptions import ValueError as NaclValueError
from nacl.public import PrivateKey, PublicKey, SealedBox

from infraagent.exceptions import EncryptionError, ValidationError

PUBLIC_KEY_SIZE = PublicKey.SIZE
TAG_SIZE = 16
SEAL_OVERHEAD = PUBLIC_KEY_SIZE + TAG_SIZE


def _decode_key(encoded: str | bytes, size: int, kind: str) -> bytes:
    if isinstance(encoded, bytes) and len(encoded) == size:
        return encoded

    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise EncryptionError(f"{kind} is not valid base64", cause=e) from e

    if len(raw) != size:
        raise EncryptionError(f"{kind} must be {size} bytes, got {len(raw)}")
    return raw


def load_public_key(recipient_public_key: str | bytes) -> PublicKey:
    """Parse a base64 (or raw 32-byte) X25519 public key.

    Raises:
        EncryptionError: If the key is malformed
    """
    raw = _decode_key(recipient_public_key, PUBLIC_KEY_SIZE, "Recipient public key")
    try:
        return PublicKey(raw)
    except (NaclTypeError, NaclValueError) as e:
        raise EncryptionError("Recipient public key is not a valid X25519 key", cause=e) from e


def seal(plaintext: str, recipient_public_key: str | bytes) -> str:
    """Encrypt ``plaintext`` so only the holder of the matching private key can read it.

    Args:
        plaintext: Secret value to seal
        recipient_public_key: Base64-encoded X25519 public key published by
            the recipient platform

    Returns:
        Base64 sealed message (ephemeral public key + ciphertext + tag)

    Raises:
        ValidationError: If ``plaintext`` is empty
        EncryptionError: If the public key is malformed or unusable
    """
    if not isinstance(plaintext, str) or not plaintext:
        raise ValidationError("Secret value to seal cannot be empty")

    public_key = load_public_key(recipient_public_key)
    try:
        sealed = SealedBox(public_key).encrypt(plaintext.encode("utf-8"))
    except CryptoError as e:
        # libsodium refuses low-order points (e.g. an all-zero key)
        raise EncryptionError("Recipient public key cannot be used for key agreement", cause=e) from e

    return base64.b64encode(bytes(sealed)).decode("ascii")


def unseal(sealed_message: str, private_key: str | bytes | PrivateKey) -> str:
    """Decrypt a sealed message with the recipient's private key.

    Raises:
        EncryptionError: If the message is malformed, was tampered with, or
            was sealed for a different key
    """
    if not isinstance(private_key, PrivateKey):
        raw_key = _decode_key(private_key, PrivateKey.SIZE, "Private key")
        private_key = PrivateKey(raw_key)

    try:
        ciphertext = base64.b64decode(sealed_message, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise EncryptionError("Sealed message is not valid base64", cause=e) from e

    try:
        plaintext = SealedBox(private_key).decrypt(ciphertext)
    except (CryptoError, NaclTypeError) as e:
        raise EncryptionError("Sealed message failed authentication", cause=e) from e

    return plaintext.decode("utf-8")


def sealed_length(plaintext: str) -> int:
    """Decoded length of ``seal(plaintext, ...)``."""
    return SEAL_OVERHEAD + len(plaintext.encode("utf-8"))
