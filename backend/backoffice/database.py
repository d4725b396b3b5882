from contextlib import contextmanager
from typing import Callable, ContextManager, Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from backoffice.config import settings

engine = create_engine(
    settings.postgres_dsn,
    future=True,
    pool_pre_ping=True,
)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, class_=Session)

SessionScope = Callable[[], ContextManager[Session]]


@contextmanager
def get_session(factory: Optional[sessionmaker] = None) -> Iterator[Session]:
    session = (factory or SessionLocal)()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def session_scope_for(factory: sessionmaker) -> SessionScope:
    """Bind ``get_session`` to a specific session factory."""

    def scope() -> ContextManager[Session]:
        return get_session(factory)

    return scope
