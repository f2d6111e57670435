"""At-rest encryption for upstream API keys.

Stores call ``seal`` before persisting and ``unseal`` after loading.
Without a configured key both are identity functions.
"""

from cryptography.fernet import Fernet, InvalidToken

SEALED_PREFIX = "fernet:"


class KeyCipher:
    """Fernet wrapper that tags ciphertext so plaintext rows still load."""

    def __init__(self, key: str = ""):
        self._fernet = Fernet(key.encode()) if key else None

    @property
    def enabled(self) -> bool:
        return self._fernet is not None

    def seal(self, api_key: str) -> str:
        if not api_key or self._fernet is None:
            return api_key
        token = self._fernet.encrypt(api_key.encode()).decode()
        return f"{SEALED_PREFIX}{token}"

    def unseal(self, stored: str) -> str:
        if not stored or not stored.startswith(SEALED_PREFIX):
            return stored
        if self._fernet is None:
            raise ValueError("Encrypted API key found but API_KEY_ENCRYPTION_KEY is not set")
        try:
            return self._fernet.decrypt(stored[len(SEALED_PREFIX):].encode()).decode()
        except InvalidToken as e:
            raise ValueError("API key could not be decrypted with the configured key") from e
