"""Credential hashing and recovery-file encryption."""

import base64
import hashlib
import json
import secrets
import string
from datetime import datetime, timezone
from uuid import UUID

import bcrypt
from cryptography.fernet import Fernet, InvalidToken

from counsel.config import get_settings

settings = get_settings()

RECOVERY_KEY_LENGTH = 32
_RECOVERY_ALPHABET = string.ascii_letters + string.digits

# bcrypt only looks at the first 72 bytes of a secret
_BCRYPT_MAX_BYTES = 72


class InvalidRecoveryFile(Exception):
    """Recovery file could not be decrypted or parsed."""


def hash_secret(raw: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(raw.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt).decode("utf-8")


def verify_secret(raw: str, hashed: str | None) -> bool:
    if not hashed:
        return False
    return bcrypt.checkpw(raw.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8"))


def generate_recovery_key() -> str:
    return "".join(secrets.choice(_RECOVERY_ALPHABET) for _ in range(RECOVERY_KEY_LENGTH))


def _fernet() -> Fernet:
    digest = hashlib.sha256(settings.recovery_key_secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_recovery_file(recovery_key: str, user_id: UUID) -> str:
    """Build the encrypted recovery file content for a user."""
    payload = json.dumps(
        {
            "recoveryKey": recovery_key,
            "userId": str(user_id),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    )
    return _fernet().encrypt(payload.encode("utf-8")).decode("utf-8")


def decrypt_recovery_file(content: str) -> tuple[str, UUID]:
    """
    Decrypt recovery file content.

    Returns (recovery_key, user_id). Raises InvalidRecoveryFile on any
    tampering, wrong secret, or malformed payload.
    """
    try:
        raw = _fernet().decrypt(content.strip().encode("utf-8"))
        data = json.loads(raw)
        return str(data["recoveryKey"]), UUID(str(data["userId"]))
    except (InvalidToken, ValueError, KeyError, TypeError) as e:
        raise InvalidRecoveryFile(str(e)) from e
