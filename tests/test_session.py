"""
Tests for MasterKeySession.

Tests cover:
- set/get/clear slot semantics
- require() and KeyUnavailable
- unlock() derivation and the async context manager
- Idle TTL auto-lock
"""
from types import SimpleNamespace

import pytest

from passwordx_vault.vault import session as session_module
from passwordx_vault.exceptions import InvalidSalt, KeyUnavailable
from passwordx_vault.vault.config import VaultConfig
from passwordx_vault.vault.kdf import DerivedKey
from passwordx_vault.vault.session import MasterKeySession


@pytest.fixture
def session():
    """Create a fresh, locked session."""
    return MasterKeySession()


class TestSlot:
    """Tests for the single key slot."""

    def test_new_session_is_locked(self, session):
        assert session.get() is None
        assert session.locked is True

    def test_set_then_get(self, session, master_key):
        session.set(master_key)
        assert session.get() is master_key
        assert session.locked is False

    def test_set_replaces_and_destroys_previous(self, session):
        first = DerivedKey(b"\x01" * 32)
        second = DerivedKey(b"\x02" * 32)
        session.set(first)
        session.set(second)
        assert session.get() is second
        assert first.destroyed is True

    def test_set_same_key_twice(self, session, master_key):
        session.set(master_key)
        session.set(master_key)
        assert session.get() is master_key
        assert master_key.destroyed is False

    def test_clear_makes_key_unavailable(self, session, master_key):
        session.set(master_key)
        session.clear()
        assert session.get() is None
        assert master_key.destroyed is True

    def test_clear_when_locked_is_noop(self, session):
        session.clear()
        assert session.get() is None

    def test_lock_alias(self, session, master_key):
        session.set(master_key)
        session.lock()
        assert session.locked is True

    def test_cannot_hold_destroyed_key(self, session):
        key = DerivedKey(b"\x01" * 32)
        key.destroy()
        with pytest.raises(ValueError):
            session.set(key)

    def test_key_destroyed_elsewhere_reads_as_locked(self, session):
        key = DerivedKey(b"\x01" * 32)
        session.set(key)
        key.destroy()
        assert session.get() is None

    def test_repr_hides_key(self, session, master_key):
        session.set(master_key)
        assert repr(session) == "<MasterKeySession unlocked>"
        session.clear()
        assert repr(session) == "<MasterKeySession locked>"

    def test_repr_locked_after_key_destroyed_elsewhere(self, session):
        key = DerivedKey(b"\x01" * 32)
        session.set(key)
        key.destroy()
        assert repr(session) == "<MasterKeySession locked>"


class TestRequire:
    """Tests for require()."""

    def test_require_locked_raises(self, session):
        with pytest.raises(KeyUnavailable):
            session.require()

    def test_require_unlocked(self, session, master_key):
        session.set(master_key)
        assert session.require() is master_key

    def test_key_unavailable_is_runtime_error(self, session):
        with pytest.raises(RuntimeError):
            session.require()


class TestUnlock:
    """Tests for unlock() and the context manager."""

    @pytest.mark.asyncio
    async def test_unlock_derives_and_holds(self, session, salt, master_key):
        key = await session.unlock("CorrectHorse1!", salt)
        assert key == master_key
        assert session.get() is key

    @pytest.mark.asyncio
    async def test_unlock_with_wrong_password_still_unlocks(self, session, salt, master_key):
        """A wrong password is only detected when decrypting."""
        key = await session.unlock("WrongPassword", salt)
        assert session.locked is False
        assert key != master_key

    @pytest.mark.asyncio
    async def test_unlock_invalid_salt_stays_locked(self, session):
        with pytest.raises(InvalidSalt):
            await session.unlock("CorrectHorse1!", "not-a-salt!")
        assert session.locked is True

    @pytest.mark.asyncio
    async def test_unlock_uses_configured_backend(self, salt):
        session = MasterKeySession(VaultConfig(cipher_backend="chacha20"))
        key = await session.unlock("CorrectHorse1!", salt)
        assert key.backend == "chacha20"

    @pytest.mark.asyncio
    async def test_context_manager_locks_on_exit(self, salt):
        async with MasterKeySession() as session:
            await session.unlock("CorrectHorse1!", salt)
            assert session.locked is False
        assert session.locked is True

    @pytest.mark.asyncio
    async def test_context_manager_locks_on_error(self, master_key):
        session = MasterKeySession()
        with pytest.raises(RuntimeError):
            async with session:
                session.set(master_key)
                raise RuntimeError("boom")
        assert session.get() is None


class TestSessionTTL:
    """Tests for idle auto-lock."""

    def test_no_ttl_never_expires(self, session, master_key, monkeypatch):
        session.set(master_key)
        clock = [1_000_000.0]
        monkeypatch.setattr(session_module, "time", SimpleNamespace(monotonic=lambda: clock[0]))
        assert session.get() is master_key

    def test_ttl_expires_idle_key(self, master_key, monkeypatch):
        clock = [100.0]
        monkeypatch.setattr(session_module, "time", SimpleNamespace(monotonic=lambda: clock[0]))
        session = MasterKeySession(VaultConfig(session_ttl=60))
        session.set(master_key)
        clock[0] += 30
        assert session.get() is master_key
        clock[0] += 59
        assert session.get() is master_key
        clock[0] += 61
        assert session.locked is True
        assert session.get() is None
        assert master_key.destroyed is True

    def test_repr_locked_once_expired(self, master_key, monkeypatch):
        clock = [100.0]
        monkeypatch.setattr(session_module, "time", SimpleNamespace(monotonic=lambda: clock[0]))
        session = MasterKeySession(VaultConfig(session_ttl=60))
        session.set(master_key)
        assert repr(session) == "<MasterKeySession unlocked>"
        clock[0] += 61
        assert repr(session) == "<MasterKeySession locked>"
