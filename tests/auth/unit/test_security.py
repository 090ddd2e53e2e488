"""
Unit tests for password hashing and OAuth state signing.
"""
import pytest

from auth_service.core.security import PasswordHasher, StateSigner


class TestPasswordHasher:
    def test_hash_is_salted(self):
        assert PasswordHasher.hash("Abc12345!") != PasswordHasher.hash("Abc12345!")

    def test_verify_accepts_matching_password(self):
        hashed = PasswordHasher.hash("Abc12345!")
        assert PasswordHasher.verify("Abc12345!", hashed) is True
        assert PasswordHasher.verify("Wrong1234!", hashed) is False

    def test_missing_hash_never_verifies(self):
        assert PasswordHasher.verify("Abc12345!", None) is False
        assert PasswordHasher.verify("Abc12345!", "") is False


class TestStateSigner:
    def test_round_trip(self):
        signer = StateSigner(secret="state-secret")
        token = signer.dumps({"provider": "github"})
        assert signer.loads(token, max_age=60) == {"provider": "github"}

    def test_tampered_state_is_rejected(self):
        signer = StateSigner(secret="state-secret")
        token = signer.dumps({"provider": "github"})
        with pytest.raises(ValueError):
            StateSigner(secret="other-secret").loads(token)
        with pytest.raises(ValueError):
            signer.loads(token + "x")

    def test_expired_state_is_rejected(self):
        signer = StateSigner(secret="state-secret")
        token = signer.dumps({"provider": "github"})
        with pytest.raises(ValueError):
            signer.loads(token, max_age=-1)
