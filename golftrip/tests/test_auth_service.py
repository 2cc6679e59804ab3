"""
Unit tests for authentication service.
Tests password hashing, token generation and the session cookie format.
"""
import pytest
from golftrip.services import auth_service


class TestPasswordHashing:
    """Tests for password hashing and verification."""

    def test_hash_password(self):
        """Test password hashing produces different hashes for same password."""
        password = "test_password_123"
        hash1 = auth_service.hash_password(password)
        hash2 = auth_service.hash_password(password)

        # Hashes should be different (due to salt)
        assert hash1 != hash2
        # But both should verify correctly
        assert auth_service.verify_password(password, hash1)
        assert auth_service.verify_password(password, hash2)

    def test_hash_is_not_plaintext(self):
        password = "test_password_123"
        password_hash = auth_service.hash_password(password)
        assert password not in password_hash
        assert password_hash.startswith("$2")

    def test_verify_password_incorrect(self):
        """Test password verification with incorrect password."""
        password_hash = auth_service.hash_password("test_password_123")
        assert auth_service.verify_password("wrong_password", password_hash) is False

    def test_verify_password_empty(self):
        password_hash = auth_service.hash_password("test_password_123")
        assert auth_service.verify_password("", password_hash) is False

    def test_verify_password_malformed_hash(self):
        """A corrupt stored hash is a failed match, not an exception."""
        assert auth_service.verify_password("anything", "not-a-bcrypt-hash") is False


class TestTokens:
    def test_session_tokens_are_unique(self):
        tokens = {auth_service.generate_session_token() for _ in range(50)}
        assert len(tokens) == 50

    def test_session_token_entropy(self):
        # 32 random bytes, base64url encoded
        assert len(auth_service.generate_session_token()) >= 43

    def test_reset_tokens_differ_from_each_other(self):
        assert auth_service.generate_password_reset_token() != auth_service.generate_password_reset_token()


class TestEmailNormalization:
    def test_strips_whitespace(self):
        assert auth_service.normalize_email("  golfer@example.com ") == "golfer@example.com"

    def test_preserves_case(self):
        assert auth_service.normalize_email("Golfer@Example.com") == "Golfer@Example.com"


class TestSessionCookie:
    """Tests for reading and writing the ``session`` cookie."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("session=abc123", "abc123"),
            ("theme=dark; session=abc123", "abc123"),
            ("session=abc123; theme=dark", "abc123"),
            ("theme=dark", None),
            ("session=", None),
            ("", None),
            (None, None),
            ("mysession=abc123", None),
        ],
    )
    def test_get_session_token(self, header, expected):
        assert auth_service.get_session_token(header) == expected

    def test_create_session_cookie(self, monkeypatch):
        monkeypatch.delenv("SESSION_COOKIE_SECURE", raising=False)
        cookie = auth_service.create_session_cookie("tok")
        assert cookie == "session=tok; Path=/; HttpOnly; SameSite=Lax; Max-Age=2592000"

    def test_clear_session_cookie(self, monkeypatch):
        monkeypatch.delenv("SESSION_COOKIE_SECURE", raising=False)
        assert auth_service.clear_session_cookie() == "session=; Path=/; HttpOnly; SameSite=Lax; Max-Age=0"

    def test_secure_flag_from_environment(self, monkeypatch):
        monkeypatch.setenv("SESSION_COOKIE_SECURE", "true")
        assert auth_service.create_session_cookie("tok").endswith("; Secure")
