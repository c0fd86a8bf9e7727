import base64
import binascii
import logging
import os

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

logger = logging.getLogger(__name__)

KEY_LENGTH = 32
IV_LENGTH = 16
AUTH_TAG_LENGTH = 16


class TokenCipherError(Exception):
    """Base class for token encryption failures."""


class EncryptionKeyError(TokenCipherError):
    """TOKEN_ENCRYPTION_KEY is missing or is not 64 hex characters."""


class TokenFormatError(TokenCipherError):
    """Envelope is not ``iv:authTag:ciphertext``."""


class TokenAuthenticationError(TokenCipherError):
    """Auth tag did not verify: the envelope was tampered with or the key is wrong."""


class TokenCipher:
    """AES-256-GCM encryption for third-party access tokens stored at rest.

    Envelope format: ``base64(iv):base64(authTag):base64(ciphertext)``, with a
    fresh 16-byte IV per call and a 16-byte tag. One key for the whole
    process; there is no rotation or associated data.
    """

    def __init__(self, key_hex: str | None):
        if not key_hex:
            raise EncryptionKeyError("Encryption key not configured")
        try:
            key = bytes.fromhex(key_hex)
        except ValueError as e:
            raise EncryptionKeyError("Encryption key must be hex encoded") from e
        if len(key) != KEY_LENGTH:
            raise EncryptionKeyError("Invalid encryption key length. Must be 64 hex characters (32 bytes)")
        self._aesgcm = AESGCM(key)

    def encrypt(self, plaintext: str) -> str:
        iv = os.urandom(IV_LENGTH)
        # AESGCM trả về ciphertext || tag
        sealed = self._aesgcm.encrypt(iv, plaintext.encode("utf-8"), None)
        ciphertext, auth_tag = sealed[:-AUTH_TAG_LENGTH], sealed[-AUTH_TAG_LENGTH:]
        return ":".join(
            base64.b64encode(part).decode("ascii") for part in (iv, auth_tag, ciphertext)
        )

    def decrypt(self, envelope: str) -> str:
        parts = envelope.split(":")
        if len(parts) != 3:
            raise TokenFormatError("Invalid encrypted data format")

        try:
            iv, auth_tag, ciphertext = (base64.b64decode(part, validate=True) for part in parts)
        except (binascii.Error, ValueError) as e:
            raise TokenFormatError("Invalid encrypted data format") from e
        if len(iv) != IV_LENGTH or len(auth_tag) != AUTH_TAG_LENGTH:
            raise TokenFormatError("Invalid encrypted data format")

        try:
            plaintext = self._aesgcm.decrypt(iv, ciphertext + auth_tag, None)
        except InvalidTag as e:
            raise TokenAuthenticationError("Token authentication failed") from e
        return plaintext.decode("utf-8")

    @staticmethod
    def generate_key() -> str:
        return os.urandom(KEY_LENGTH).hex()


if __name__ == '__main__':
    from app.core.config import settings

    print("Running token cipher self-test...")
    try:
        cipher = TokenCipher(settings.TOKEN_ENCRYPTION_KEY)
    except EncryptionKeyError as e:
        print(f"Skipping test: {e}")
        print(f"Generate one using: python scripts/generate_encryption_key.py (e.g. {TokenCipher.generate_key()})")
    else:
        original_text = "my_very_secret_github_oauth_token_string"
        encrypted = cipher.encrypt(original_text)
        print(f"Encrypted: {encrypted}")
        decrypted = cipher.decrypt(encrypted)
        print("Token cipher test PASSED." if decrypted == original_text else "Token cipher test FAILED.")
