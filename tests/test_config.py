"""
tests/test_config.py -- Unit tests for core/config.py Settings validation.

Covers:
  - SECRET_KEY: generated in DEBUG, required otherwise, minimum length
  - BCRYPT_ROUNDS bounds and a positive token lifetime
"""

import pytest
from pydantic import ValidationError

from core.config import Settings


def test_debug_generates_secret_key():
    """DEBUG with no SECRET_KEY generates a usable throwaway key."""
    settings = Settings(debug=True, secret_key="")
    assert len(settings.secret_key) >= 32


def test_missing_secret_key_outside_debug():
    """Without DEBUG an empty SECRET_KEY is a configuration error."""
    with pytest.raises(ValidationError, match="SECRET_KEY must be set"):
        Settings(debug=False, secret_key="")


def test_short_secret_key_rejected():
    """A SECRET_KEY under 32 characters is rejected even in DEBUG."""
    with pytest.raises(ValidationError, match="at least 32"):
        Settings(debug=True, secret_key="too-short")


def test_explicit_secret_key_kept():
    """A valid explicit SECRET_KEY is used as given."""
    key = "x" * 40
    assert Settings(debug=False, secret_key=key).secret_key == key


@pytest.mark.parametrize("rounds", [3, 32])
def test_bcrypt_rounds_bounds(rounds):
    """BCRYPT_ROUNDS outside 4..31 is rejected."""
    with pytest.raises(ValidationError):
        Settings(debug=True, bcrypt_rounds=rounds)


def test_token_lifetime_must_be_positive():
    """A zero token lifetime is rejected."""
    with pytest.raises(ValidationError):
        Settings(debug=True, token_expire_seconds=0)
