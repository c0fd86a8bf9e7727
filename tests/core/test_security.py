import base64
import unittest

from app.core.security import (
    TokenCipher,
    TokenCipherError,
    EncryptionKeyError,
    TokenFormatError,
    TokenAuthenticationError,
    IV_LENGTH,
    AUTH_TAG_LENGTH,
)

TEST_KEY = "00112233445566778899aabbccddeeff00112233445566778899aabbccddeeff"
OTHER_KEY = "ffeeddccbbaa99887766554433221100ffeeddccbbaa99887766554433221100"


def _flip_first_byte(part_b64: str) -> str:
    raw = bytearray(base64.b64decode(part_b64))
    raw[0] ^= 0x01
    return base64.b64encode(bytes(raw)).decode("ascii")


class TestTokenCipher(unittest.TestCase):

    def setUp(self):
        self.cipher = TokenCipher(TEST_KEY)

    def test_encrypt_decrypt_roundtrip(self):
        for plaintext in ["ghp_exampletoken123", "", "unicode ✓ token"]:
            envelope = self.cipher.encrypt(plaintext)
            self.assertEqual(self.cipher.decrypt(envelope), plaintext)

    def test_envelope_format(self):
        envelope = self.cipher.encrypt("ghp_exampletoken123")
        parts = envelope.split(":")
        self.assertEqual(len(parts), 3)
        iv, auth_tag, ciphertext = (base64.b64decode(part) for part in parts)
        self.assertEqual(len(iv), IV_LENGTH)
        self.assertEqual(len(auth_tag), AUTH_TAG_LENGTH)
        self.assertEqual(len(ciphertext), len("ghp_exampletoken123"))

    def test_fresh_iv_per_encryption(self):
        first = self.cipher.encrypt("same-token")
        second = self.cipher.encrypt("same-token")
        self.assertNotEqual(first, second)
        self.assertNotEqual(first.split(":")[0], second.split(":")[0])

    def test_tampered_ciphertext_fails_authentication(self):
        iv, auth_tag, ciphertext = self.cipher.encrypt("ghp_exampletoken123").split(":")
        tampered = ":".join([iv, auth_tag, _flip_first_byte(ciphertext)])
        with self.assertRaises(TokenAuthenticationError):
            self.cipher.decrypt(tampered)

    def test_tampered_auth_tag_fails_authentication(self):
        iv, auth_tag, ciphertext = self.cipher.encrypt("ghp_exampletoken123").split(":")
        tampered = ":".join([iv, _flip_first_byte(auth_tag), ciphertext])
        with self.assertRaises(TokenAuthenticationError):
            self.cipher.decrypt(tampered)

    def test_wrong_key_fails_authentication(self):
        envelope = self.cipher.encrypt("ghp_exampletoken123")
        with self.assertRaises(TokenAuthenticationError):
            TokenCipher(OTHER_KEY).decrypt(envelope)

    def test_wrong_part_count_is_format_error(self):
        for envelope in ["", "abc", "a:b", "a:b:c:d"]:
            with self.assertRaises(TokenFormatError):
                self.cipher.decrypt(envelope)

    def test_invalid_base64_is_format_error(self):
        with self.assertRaises(TokenFormatError):
            self.cipher.decrypt("not base64!:###:???")

    def test_wrong_iv_length_is_format_error(self):
        _, auth_tag, ciphertext = self.cipher.encrypt("ghp_exampletoken123").split(":")
        short_iv = base64.b64encode(b"\x00" * 12).decode("ascii")
        with self.assertRaises(TokenFormatError):
            self.cipher.decrypt(":".join([short_iv, auth_tag, ciphertext]))

    def test_format_and_auth_errors_share_base_class(self):
        self.assertTrue(issubclass(TokenFormatError, TokenCipherError))
        self.assertTrue(issubclass(TokenAuthenticationError, TokenCipherError))

    def test_missing_key_rejected(self):
        for key in [None, ""]:
            with self.assertRaisesRegex(EncryptionKeyError, "not configured"):
                TokenCipher(key)

    def test_wrong_key_length_rejected(self):
        for key in [TEST_KEY[:62], TEST_KEY + "00", "00" * 16]:
            with self.assertRaisesRegex(EncryptionKeyError, "64 hex characters"):
                TokenCipher(key)

    def test_non_hex_key_rejected(self):
        with self.assertRaises(EncryptionKeyError):
            TokenCipher("z" * 64)

    def test_generate_key_is_usable(self):
        key = TokenCipher.generate_key()
        self.assertEqual(len(key), 64)
        int(key, 16)
        cipher = TokenCipher(key)
        self.assertEqual(cipher.decrypt(cipher.encrypt("token")), "token")


if __name__ == '__main__':
    unittest.main()
