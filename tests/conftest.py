"""Shared fixtures: in-memory stores, a wired identity resolver and scoped store."""

import pytest

from lifeledger.audit import AuditLogger
from lifeledger.auth import IdentityResolver
from lifeledger.config import AuthSettings, get_settings
from lifeledger.context import ChangeNotifier
from lifeledger.services.storage import InMemoryStore
from lifeledger.store import HabitRepository, ScopedRecordStore, TransactionRepository


@pytest.fixture
def storage():
    return InMemoryStore()


@pytest.fixture
def session_store():
    return InMemoryStore()


@pytest.fixture
def notifier():
    return ChangeNotifier()


@pytest.fixture
def audit():
    return AuditLogger()


@pytest.fixture
def identity(storage, session_store, notifier, audit):
    # pbkdf2 keeps the suite fast; production uses scrypt
    return IdentityResolver(
        storage,
        session_store,
        notifier,
        audit_logger=audit,
        settings=AuthSettings(password_hash_method="pbkdf2:sha256:1000"),
    )


@pytest.fixture
def scoped(storage, identity, notifier, audit):
    return ScopedRecordStore(storage, identity, notifier, audit_logger=audit)


@pytest.fixture
def habits(scoped):
    return HabitRepository(scoped)


@pytest.fixture
def transactions(scoped):
    return TransactionRepository(scoped)


@pytest.fixture
def login_as(identity):
    """Register (if needed) and log in a local user; returns their id."""

    def _login(email="ana@example.com", password="secret1", name="Ana"):
        identity.register(email, password, name)
        result = identity.login(email, password)
        assert result.success, result.error
        return result.user.id

    return _login


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep tests away from a developer's .env and real credentials."""
    monkeypatch.chdir(tmp_path)
    for var in ("GEMINI_API_KEY", "STORAGE_BACKEND", "STORAGE_JSON_PATH"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
