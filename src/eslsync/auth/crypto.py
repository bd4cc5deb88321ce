"""Decryption of AIMS passwords stored on company records.

Current format is ``base64(iv[12] + tag[16] + ciphertext)`` under AES-256-GCM
with a key derived from the deployment secret by PBKDF2-SHA256. Older rows
may still hold the OpenSSL ``Salted__`` format (AES-256-CBC, MD5
EVP_BytesToKey), which is decrypted as a fallback.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes, padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from eslsync.contracts.exceptions import AuthenticationError

_KDF_SALT = b"electisspace-encryption-salt-v1"
_KDF_ITERATIONS = 100_000
_KEY_LENGTH = 32
_IV_LENGTH = 12
_TAG_LENGTH = 16
_LEGACY_PREFIX = b"Salted__"


def _derive_key(secret: str) -> bytes:
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=_KEY_LENGTH, salt=_KDF_SALT, iterations=_KDF_ITERATIONS)
    return kdf.derive(secret.encode("utf-8"))


def _evp_bytes_to_key(secret: bytes, salt: bytes, key_length: int, iv_length: int) -> tuple[bytes, bytes]:
    derived = b""
    block = b""
    while len(derived) < key_length + iv_length:
        block = hashlib.md5(block + secret + salt).digest()
        derived += block
    return derived[:key_length], derived[key_length : key_length + iv_length]


class PasswordCipher:
    """AES-256-GCM cipher bound to one deployment secret."""

    def __init__(self, secret: str) -> None:
        if not secret:
            raise AuthenticationError("Encryption secret is empty")
        self._secret = secret
        self._key = _derive_key(secret)

    def encrypt(self, plain_text: str) -> str:
        iv = os.urandom(_IV_LENGTH)
        sealed = AESGCM(self._key).encrypt(iv, plain_text.encode("utf-8"), None)
        # AESGCM appends the tag; the stored layout puts it before the ciphertext.
        ciphertext, tag = sealed[:-_TAG_LENGTH], sealed[-_TAG_LENGTH:]
        return base64.b64encode(iv + tag + ciphertext).decode("ascii")

    def decrypt(self, cipher_text: str) -> str:
        try:
            combined = base64.b64decode(cipher_text, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise AuthenticationError("Decryption failed: payload is not base64") from exc

        if combined.startswith(_LEGACY_PREFIX):
            return self._decrypt_legacy(combined)
        return self._decrypt_gcm(combined)

    def _decrypt_gcm(self, combined: bytes) -> str:
        if len(combined) < _IV_LENGTH + _TAG_LENGTH + 1:
            raise AuthenticationError("Decryption failed: ciphertext too short")
        iv = combined[:_IV_LENGTH]
        tag = combined[_IV_LENGTH : _IV_LENGTH + _TAG_LENGTH]
        ciphertext = combined[_IV_LENGTH + _TAG_LENGTH :]
        try:
            plain = AESGCM(self._key).decrypt(iv, ciphertext + tag, None)
        except InvalidTag as exc:
            raise AuthenticationError("Decryption failed: authentication tag mismatch") from exc
        return plain.decode("utf-8")

    def _decrypt_legacy(self, combined: bytes) -> str:
        salt = combined[8:16]
        ciphertext = combined[16:]
        if len(salt) != 8 or not ciphertext or len(ciphertext) % 16:
            raise AuthenticationError("Decryption failed: invalid legacy ciphertext")
        key, iv = _evp_bytes_to_key(self._secret.encode("utf-8"), salt, 32, 16)
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        padded = decryptor.update(ciphertext) + decryptor.finalize()
        unpadder = padding.PKCS7(128).unpadder()
        try:
            plain = unpadder.update(padded) + unpadder.finalize()
            return plain.decode("utf-8")
        except (ValueError, UnicodeDecodeError) as exc:
            raise AuthenticationError("Decryption failed: invalid legacy ciphertext") from exc
