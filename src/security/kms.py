# src/security/kms.py

from cryptography.fernet import Fernet, InvalidToken
import os
import stat
from typing import Union, Optional
import logging

from src.utils.error_handling import MaskingError


class KmsService:
    def __init__(self,
                 key_store_path: Optional[str] = None,
                 master_key: Optional[Union[str, bytes]] = None) -> None:
        """
        Initialize key management service

        Args:
            key_store_path: Directory holding the generated ``current.key``
            master_key: Fernet key supplied by configuration; takes
                precedence over the key store
        """
        self.key_store_path = key_store_path
        self.logger = logging.getLogger(__name__)

        self.current_key = self._initialize_key(master_key)
        self._fernet = Fernet(self.current_key)

    def _initialize_key(self, master_key: Optional[Union[str, bytes]]) -> bytes:
        """Use the configured master key or load one from the key store"""
        if master_key:
            key = master_key.encode() if isinstance(master_key, str) else master_key
            try:
                Fernet(key)
            except (ValueError, TypeError) as e:
                raise MaskingError(f"Invalid master key: {e}") from e
            self.logger.info("Using configured master key")
            return key

        if not self.key_store_path:
            self.logger.warning("No key store configured, using an ephemeral key")
            return Fernet.generate_key()

        try:
            if not os.path.exists(self.key_store_path):
                os.makedirs(self.key_store_path, mode=stat.S_IRWXU)
            key = self._load_or_generate_key()
            self.logger.info("Encryption key initialized successfully")
            return key
        except OSError as e:
            self.logger.error(f"Failed to initialize encryption key: {str(e)}")
            raise

    def _load_or_generate_key(self) -> bytes:
        """Load existing key or generate new one"""
        key_file = os.path.join(self.key_store_path, 'current.key')

        if os.path.exists(key_file):
            with open(key_file, 'rb') as f:
                key = f.read().strip()
            try:
                Fernet(key)
            except (ValueError, TypeError) as e:
                raise MaskingError(f"Invalid key in {key_file}: {e}") from e
            return key

        key = Fernet.generate_key()
        self._save_key(key_file, key)
        return key

    def _save_key(self, key_file: str, key: bytes) -> None:
        """Save key readable by the owner only"""
        fd = os.open(key_file, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, stat.S_IRUSR | stat.S_IWUSR)
        with os.fdopen(fd, 'wb') as f:
            f.write(key)

    def encrypt(self, data: Union[str, bytes]) -> str:
        """
        Encrypt data

        Args:
            data: Data to encrypt

        Returns:
            URL-safe encrypted token
        """
        if isinstance(data, str):
            data = data.encode()
        return self._fernet.encrypt(data).decode()

    def decrypt(self, token: Union[str, bytes]) -> str:
        """
        Decrypt a token produced by ``encrypt``

        Raises:
            MaskingError: token is malformed or was encrypted with another key
        """
        if isinstance(token, str):
            token = token.encode()
        try:
            return self._fernet.decrypt(token).decode()
        except InvalidToken as e:
            self.logger.error("Decryption failed: invalid token")
            raise MaskingError("Invalid or foreign encryption token") from e
