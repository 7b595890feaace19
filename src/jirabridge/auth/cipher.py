"""Encryption at rest for OAuth tokens."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from cryptography.fernet import Fernet, InvalidToken

from jirabridge.contracts.exceptions import ConfigurationError, ReauthRequiredError

logger = logging.getLogger(__name__)


class TokenCipher:
    """Fernet (AES-128-CBC + HMAC-SHA256) wrapper keyed by a locally held key."""

    def __init__(self, key: bytes) -> None:
        try:
            self._fernet = Fernet(key)
        except ValueError as exc:
            raise ConfigurationError("invalid token encryption key") from exc

    @classmethod
    def generate(cls) -> TokenCipher:
        return cls(Fernet.generate_key())

    @classmethod
    def from_key_file(cls, path: Path, *, create: bool = True) -> TokenCipher:
        """Load the key at *path*, creating it with mode 0600 when missing."""
        if path.exists():
            try:
                key = path.read_bytes().strip()
            except OSError as exc:
                raise ConfigurationError(f"failed reading key file: {path}") from exc
            return cls(key)

        if not create:
            raise ConfigurationError(f"key file not found: {path}")

        key = Fernet.generate_key()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(key)
            os.chmod(path, 0o600)
        except OSError as exc:
            raise ConfigurationError(f"failed writing key file: {path}") from exc
        logger.info("Generated token encryption key at %s", path)
        return cls(key)

    def encrypt(self, value: str) -> str:
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, value: str) -> str:
        try:
            return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except (InvalidToken, UnicodeError) as exc:
            raise ReauthRequiredError("Stored token cannot be decrypted - please reconnect to Jira") from exc
