"""Auth module public exports."""

from jirabridge.auth.cipher import TokenCipher
from jirabridge.auth.credentials import CredentialManager

__all__ = ["CredentialManager", "TokenCipher"]
