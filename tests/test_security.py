import unittest
from datetime import timedelta

from jose import jwt

from components.core import security
from components.core.exceptions import InvalidCredentialsError, InvalidTokenError
from components.user.schemas import TokenPayload


class PasswordHashingTests(unittest.TestCase):
    def test_hash_verifies_same_password(self):
        for password in ["secret123", "pässwörd", "x" * 60]:
            hashed = security.hash_password(password)
            self.assertNotEqual(hashed, password)
            self.assertTrue(security.verify_password(password, hashed))

    def test_hash_rejects_other_password(self):
        hashed = security.hash_password("secret123")
        self.assertFalse(security.verify_password("secret124", hashed))
        self.assertFalse(security.verify_password("", hashed))

    def test_hashes_are_salted(self):
        self.assertNotEqual(security.hash_password("secret123"), security.hash_password("secret123"))

    def test_malformed_hash_raises_invalid_credentials(self):
        with self.assertRaises(InvalidCredentialsError):
            security.verify_password("secret123", "not-a-bcrypt-hash")


class TokenTests(unittest.TestCase):
    def setUp(self):
        self.payload = TokenPayload(user_id="abc123", email="user@example.com")

    def test_round_trip_returns_payload(self):
        token = security.create_access_token(self.payload)
        self.assertEqual(security.verify_token(token), self.payload)

    def test_claims_use_camel_case(self):
        token = security.create_access_token(self.payload)
        claims = jwt.get_unverified_claims(token)
        self.assertEqual(claims["userId"], "abc123")
        self.assertEqual(claims["email"], "user@example.com")
        self.assertIn("exp", claims)

    def test_expired_token_is_rejected(self):
        token = security.create_access_token(self.payload, expires_delta=timedelta(seconds=-1))
        with self.assertRaises(InvalidTokenError):
            security.verify_token(token)

    def test_tampered_token_is_rejected(self):
        token = security.create_access_token(self.payload)
        forged = jwt.encode(jwt.get_unverified_claims(token), "another-key", algorithm=security.ALGORITHM)
        with self.assertRaises(InvalidTokenError):
            security.verify_token(forged)
        with self.assertRaises(InvalidTokenError):
            security.verify_token("garbage")

    def test_token_without_user_claims_is_rejected(self):
        token = jwt.encode({"sub": "abc123"}, security.SECRET_KEY, algorithm=security.ALGORITHM)
        with self.assertRaises(InvalidTokenError):
            security.verify_token(token)


if __name__ == "__main__":
    unittest.main()
