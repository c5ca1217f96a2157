"""Unit tests for the werkzeug-backed password hasher."""

from __future__ import annotations

import pytest
from app.infra.security import WerkzeugPasswordHasher
from tests.helpers.utils import FAST_HASHER


def test_hash_is_salted_and_one_way():
    first = FAST_HASHER.hash("Secr3t!")
    second = FAST_HASHER.hash("Secr3t!")

    assert first != second
    assert "Secr3t!" not in first


def test_verify_matches_only_the_original_plaintext():
    hashed = FAST_HASHER.hash("Secr3t!")

    assert FAST_HASHER.verify("Secr3t!", hashed) is True
    assert FAST_HASHER.verify("secr3t!", hashed) is False
    assert FAST_HASHER.verify("", hashed) is False


@pytest.mark.parametrize("stored", ["", "plain-text", "bogus$salt$digest", "pbkdf2:sha256:abc$s$d"])
def test_malformed_hash_verifies_false(stored):
    assert FAST_HASHER.verify("anything", stored) is False


def test_default_method_round_trip():
    hasher = WerkzeugPasswordHasher()
    assert hasher.verify("Passw0rd!", hasher.hash("Passw0rd!"))


def test_burn_runs_against_dummy_hash():
    FAST_HASHER.burn("whatever")
    assert FAST_HASHER.verify("whatever", FAST_HASHER.dummy_hash) is False


@pytest.mark.parametrize("method", ["pbkdf2:sha256:1000", "pbkdf2:sha256:2000", None])
def test_dummy_hash_uses_the_configured_method(method):
    hasher = WerkzeugPasswordHasher(method=method)

    dummy_method = hasher.dummy_hash.split("$", 1)[0]
    real_method = hasher.hash("Passw0rd!").split("$", 1)[0]

    assert dummy_method == real_method
    if method is not None:
        assert dummy_method == method


def test_dummy_hash_is_shared_per_method():
    assert WerkzeugPasswordHasher(method="pbkdf2:sha256:1000").dummy_hash == FAST_HASHER.dummy_hash
