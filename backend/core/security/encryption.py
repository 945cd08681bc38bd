"""
OAuth token encryption using Fernet symmetric encryption.
"""

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


class TokenEncryption:
    """Encrypt and decrypt OAuth tokens stored at rest."""

    def __init__(self, secret_key: str):
        """
        Initialize with a secret key.

        Args:
            secret_key: Application encryption key (hashed to 32 bytes for Fernet)
        """
        key_bytes = hashlib.sha256(secret_key.encode()).digest()
        self.fernet = Fernet(base64.urlsafe_b64encode(key_bytes))

    def encrypt(self, value: str) -> str:
        """
        Encrypt a string value.

        Returns:
            Fernet token as text; empty input gives an empty string
        """
        if not value:
            return ""

        return self.fernet.encrypt(value.encode()).decode()

    def decrypt(self, encrypted_value: str) -> str:
        """
        Decrypt a value produced by :meth:`encrypt`.

        Raises:
            ValueError: If the value was not encrypted with this key
        """
        if not encrypted_value:
            return ""

        try:
            return self.fernet.decrypt(encrypted_value.encode()).decode()
        except InvalidToken as e:
            raise ValueError("Failed to decrypt token") from e
