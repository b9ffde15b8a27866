"""
Encryption utilities for tenant webhook secrets.

Uses Fernet (symmetric encryption) from the cryptography library. The
signing secret is needed in plaintext to compute HMACs, so it is stored
encrypted and decrypted on lookup rather than hashed.
"""

from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from store_sync.utils.exceptions import ConfigurationError
from store_sync.utils.logger import get_logger

logger = get_logger(__name__)


class EncryptionService:
    """
    Service for encrypting/decrypting tenant secrets.

    Uses Fernet symmetric encryption (AES 128 in CBC mode with HMAC).
    """

    def __init__(self, encryption_key: Optional[str] = None):
        """
        Initialize encryption service.

        Args:
            encryption_key: Base64-encoded 32-byte Fernet key. If None, the
                configured ENCRYPTION_KEY is used.

        Raises:
            ConfigurationError: If the key is missing or invalid.
        """
        if encryption_key is None:
            from store_sync.utils.config import get_config
            encryption_key = get_config().encryption_key

        if not encryption_key:
            raise ConfigurationError(
                "ENCRYPTION_KEY not found. Generate with: "
                "python -c 'from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())'"
            )

        try:
            self.cipher = Fernet(encryption_key.encode('utf-8'))
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Invalid ENCRYPTION_KEY format: {e}")

        logger.debug("Encryption service initialized")

    def encrypt(self, plaintext: str) -> str:
        """
        Encrypt plaintext string.

        Raises:
            ValueError: If plaintext is empty
        """
        if not plaintext or not plaintext.strip():
            raise ValueError("Cannot encrypt empty string")

        return self.cipher.encrypt(plaintext.encode('utf-8')).decode('utf-8')

    def decrypt(self, encrypted: str) -> str:
        """
        Decrypt encrypted string.

        Raises:
            ConfigurationError: If decryption fails (wrong key or corrupted data)
        """
        try:
            return self.cipher.decrypt(encrypted.encode('utf-8')).decode('utf-8')
        except InvalidToken:
            logger.error("Decryption failed: invalid token or wrong encryption key")
            raise ConfigurationError("Stored secret cannot be decrypted with the configured key")
