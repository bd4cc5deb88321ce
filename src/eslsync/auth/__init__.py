"""Auth module public exports."""

from eslsync.auth.base import SecretResolver
from eslsync.auth.crypto import PasswordCipher
from eslsync.auth.factory import create_secret_resolver

__all__ = ["PasswordCipher", "SecretResolver", "create_secret_resolver"]
