import os

os.environ.setdefault("BACKEND_POSTGRES_DSN", "sqlite://")
os.environ.setdefault("BACKEND_BOOTSTRAP_ON_STARTUP", "false")
os.environ.setdefault("BACKEND_JWT_SECRET_KEY", "test-secret")
os.environ.setdefault("BACKEND_TRANSLATION_PROVIDER", "none")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from backoffice.actions import ServerActions
from backoffice.database import session_scope_for
from backoffice.errors import TranslationError
from backoffice.infrastructure.database.metadata import metadata


class FakeTranslator:
    def __init__(self) -> None:
        self.fail_for: set[str] = set()
        self.calls: list[tuple[str, str, str]] = []
        self.closed = False

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        self.calls.append((text, source_lang, target_lang))
        if target_lang in self.fail_for:
            raise TranslationError(f"{target_lang} is unavailable")
        return f"{text} [{target_lang}]"

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False, class_=Session)


@pytest.fixture()
def session_scope(session_factory):
    return session_scope_for(session_factory)


@pytest.fixture()
def translator() -> FakeTranslator:
    return FakeTranslator()


@pytest.fixture()
def actions(session_factory, translator) -> ServerActions:
    return ServerActions(session_factory, translator)


@pytest.fixture()
def languages(actions):
    """French (default), English and German."""
    created = {}
    for name, code, is_default in (
        ("Français", "fr", True),
        ("English", "en", False),
        ("Deutsch", "de", False),
    ):
        result = actions.create_language({"name": name, "code": code, "is_default": is_default})
        assert result.success, result.message
        created[code] = result.language
    return created
