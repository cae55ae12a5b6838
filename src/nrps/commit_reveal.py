from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Final, Union

KEY_BYTES: Final[int] = 32
DIGEST: Final[str] = "sha256"

Key = Union[bytes, bytearray, str]


class CommitmentError(Exception):
    """The HMAC could not be computed for the given key/message."""


def generate_key(num_bytes: int = KEY_BYTES) -> bytes:
    # Must come from a CSPRNG.
    return secrets.token_bytes(num_bytes)


def key_to_hex(key: bytes) -> str:
    return key.hex()


def compute_commitment(key: Key, message: str) -> str:
    """HMAC-SHA256 of ``message`` under ``key``, as 64 lowercase hex chars.

    ``key`` may be raw bytes or the hex form printed at reveal time. Any
    malformed input raises :class:`CommitmentError`; the error text never
    includes the key or the message.
    """
    raw_key = _key_bytes(key)
    if not isinstance(message, str):
        raise CommitmentError(f"message must be str, got {type(message).__name__}")
    try:
        mac = hmac.new(raw_key, message.encode("utf-8"), getattr(hashlib, DIGEST))
    except (TypeError, ValueError, UnicodeError) as exc:
        raise CommitmentError(f"cannot compute HMAC: {type(exc).__name__}") from None
    return mac.hexdigest()


def verify_commitment(*, expected_commitment: str, key: Key, message: str) -> bool:
    try:
        computed = compute_commitment(key, message)
    except CommitmentError:
        return False
    return secrets.compare_digest(expected_commitment.strip().lower().encode("utf-8"), computed.encode("ascii"))


def _key_bytes(key: Key) -> bytes:
    if isinstance(key, str):
        try:
            raw = bytes.fromhex(key.strip())
        except ValueError:
            raise CommitmentError("key is not valid hex") from None
    elif isinstance(key, (bytes, bytearray)):
        raw = bytes(key)
    else:
        raise CommitmentError(f"key must be bytes or hex str, got {type(key).__name__}")

    if not raw:
        raise CommitmentError("key is empty")
    return raw
