"""Shared fixtures: PBKDF2 is slow on purpose, so keys are derived once."""
import base64

import pytest

from passwordx_vault.vault.kdf import DerivedKey, derive_key

EXAMPLE_SALT = base64.b64encode(b"0123456789abcdef0123456789abcdef").decode("ascii")
MASTER_PASSWORD = "CorrectHorse1!"
WRONG_PASSWORD = "WrongPassword"


@pytest.fixture(scope="session")
def salt() -> str:
    return EXAMPLE_SALT


@pytest.fixture(scope="session")
def _master_key_material(salt):
    return derive_key(MASTER_PASSWORD, salt).material


@pytest.fixture(scope="session")
def _wrong_key_material(salt):
    return derive_key(WRONG_PASSWORD, salt).material


@pytest.fixture
def master_key(_master_key_material):
    """Fresh key object per test; sessions destroy the keys they drop."""
    return DerivedKey(_master_key_material)


@pytest.fixture
def wrong_key(_wrong_key_material):
    return DerivedKey(_wrong_key_material)
