"""Credential-at-rest encryption.

Provider credentials are stored as a single opaque envelope::

    base64( nonce[12] || AES-256-GCM ciphertext || tag[16] )

The plaintext is the UTF-8 JSON of the flat ``map[str, str]`` used at
registration. Envelopes are self-contained; rotating the key means
re-encrypting every stored envelope.
"""

import base64
import binascii
import hashlib
import json
import os
from collections.abc import Mapping

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from dnsplane.errors import ConfigError, CryptoError

NONCE_SIZE = 12
TAG_SIZE = 16
PBKDF2_ITERATIONS = 600_000


def derive_key(
    passphrase: str, salt: bytes | None = None, iterations: int = PBKDF2_ITERATIONS
) -> bytes:
    """Derive the 32-byte AES key from a passphrase.

    Without a salt the key is SHA-256(passphrase). With a salt, PBKDF2-HMAC-SHA256
    is used instead, which should be preferred for low-entropy passphrases.
    """
    if salt is None:
        return hashlib.sha256(passphrase.encode("utf-8")).digest()
    kdf = PBKDF2HMAC(algorithm=hashes.SHA256(), length=32, salt=salt, iterations=iterations)
    return kdf.derive(passphrase.encode("utf-8"))


class CryptoService:
    """AES-256-GCM encryption of strings and credential maps."""

    def __init__(
        self,
        passphrase: str,
        salt: bytes | None = None,
        iterations: int = PBKDF2_ITERATIONS,
    ):
        if not passphrase:
            raise ConfigError("encryption key must not be empty")
        self._aead = AESGCM(derive_key(passphrase, salt, iterations))

    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string into a base64 envelope with a fresh random nonce."""
        nonce = os.urandom(NONCE_SIZE)
        sealed = self._aead.encrypt(nonce, plaintext.encode("utf-8"), None)
        return base64.b64encode(nonce + sealed).decode("ascii")

    def decrypt(self, envelope: str) -> str:
        """Decrypt a base64 envelope produced by :meth:`encrypt`."""
        try:
            data = base64.b64decode(envelope, validate=True)
        except (binascii.Error, ValueError) as e:
            raise CryptoError("credential envelope is not valid base64") from e

        if len(data) < NONCE_SIZE + TAG_SIZE:
            raise CryptoError("credential envelope is too short")

        nonce, sealed = data[:NONCE_SIZE], data[NONCE_SIZE:]
        try:
            plaintext = self._aead.decrypt(nonce, sealed, None)
        except InvalidTag as e:
            raise CryptoError("credential envelope failed authentication") from e

        try:
            return plaintext.decode("utf-8")
        except UnicodeDecodeError as e:
            raise CryptoError("credential envelope does not contain UTF-8 text") from e

    def encrypt_json(self, data: Mapping[str, str]) -> str:
        """Serialize a string map to JSON and encrypt it."""
        return self.encrypt(json.dumps(dict(data), ensure_ascii=False))

    def decrypt_json(self, envelope: str) -> dict[str, str]:
        """Decrypt an envelope holding a JSON object of strings."""
        text = self.decrypt(envelope)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CryptoError("credential envelope does not contain JSON") from e

        if not isinstance(data, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in data.items()
        ):
            raise CryptoError("credential envelope must hold a map of strings")
        return data
