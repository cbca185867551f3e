"""Tests for the werkzeug-backed password hasher."""

from __future__ import annotations

import pytest
from authcore.infra.crypto.werkzeug_hasher import WerkzeugPasswordHasher


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    return WerkzeugPasswordHasher("pbkdf2:sha256:1000")


class TestWerkzeugPasswordHasher:
    def test_hash_then_verify(self, hasher):
        hashed = hasher.hash("Secur3!ab")

        assert hashed != "Secur3!ab"
        assert hashed.startswith("pbkdf2:sha256:1000$")
        assert hasher.verify("Secur3!ab", hashed) is True
        assert hasher.verify("Secur3!ac", hashed) is False

    def test_hashes_are_salted(self, hasher):
        assert hasher.hash("Secur3!ab") != hasher.hash("Secur3!ab")

    def test_default_method_is_scrypt(self):
        assert WerkzeugPasswordHasher().method.startswith("scrypt")

    @pytest.mark.parametrize("hashed", ["", "not-a-hash", "unknown$salt$value"])
    def test_malformed_hash_verifies_false(self, hasher, hashed):
        assert hasher.verify("Secur3!ab", hashed) is False

    @pytest.mark.parametrize("plaintext", [None, 12345, b"bytes"])
    def test_non_string_plaintext_verifies_false(self, hasher, plaintext):
        hashed = hasher.hash("Secur3!ab")
        assert hasher.verify(plaintext, hashed) is False

    def test_unsupported_method_rejected(self):
        with pytest.raises(ValueError):
            WerkzeugPasswordHasher("md5")

    def test_short_salt_rejected(self):
        with pytest.raises(ValueError):
            WerkzeugPasswordHasher("pbkdf2:sha256:1000", salt_length=4)
