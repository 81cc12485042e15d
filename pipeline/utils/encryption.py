"""Encryption of credentials held in user settings.

API keys and OAuth tokens are written through ``encrypt_value`` and read back
through ``decrypt_value`` with one process-wide Fernet key from ENCRYPTION_KEY.
"""

import base64
import hashlib
from functools import lru_cache
from typing import Optional

import structlog
from cryptography.fernet import Fernet, InvalidToken

from pipeline.config import PipelineSettings, get_settings

logger = structlog.get_logger()


class EncryptionKeyError(Exception):
    """Raised when ENCRYPTION_KEY is missing in production."""


def _load_key(config: PipelineSettings) -> bytes:
    if config.ENCRYPTION_KEY:
        raw = config.ENCRYPTION_KEY.encode()
        try:
            Fernet(raw)
            return raw
        except ValueError:
            logger.warning("ENCRYPTION_KEY is not a Fernet key, deriving one from it")
            return base64.urlsafe_b64encode(hashlib.sha256(raw).digest())

    if config.ENVIRONMENT == "production":
        raise EncryptionKeyError(
            "ENCRYPTION_KEY is required in production. "
            "Generate one with: python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
        )

    logger.warning("No ENCRYPTION_KEY set; stored credentials will not survive a restart")
    return Fernet.generate_key()


@lru_cache
def get_fernet() -> Fernet:
    """Process-wide cipher for stored credentials.

    Raises:
        EncryptionKeyError: If ENCRYPTION_KEY is missing in production
    """
    return Fernet(_load_key(get_settings()))


def validate_encryption_key() -> None:
    """Build the cipher at startup so a missing production key fails fast."""
    get_fernet()


def encrypt_value(value: Optional[str]) -> Optional[str]:
    """Encrypt a credential. Empty values pass through unchanged."""
    if not value:
        return value
    return get_fernet().encrypt(value.encode()).decode()


def decrypt_value(encrypted_value: Optional[str]) -> Optional[str]:
    """Decrypt a stored credential.

    Raises:
        InvalidToken: If the value was written with a different key
    """
    if not encrypted_value:
        return encrypted_value
    try:
        return get_fernet().decrypt(encrypted_value.encode()).decode()
    except InvalidToken:
        logger.error("Stored credential could not be decrypted")
        raise
