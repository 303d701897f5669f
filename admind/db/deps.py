from collections.abc import Generator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from admind.db.base import SessionLocal


def get_session() -> Generator[Session, None, None]:
    """One session per request; a failed statement never leaks an open transaction."""
    session = SessionLocal()
    try:
        yield session
    except SQLAlchemyError:
        session.rollback()
        raise
    finally:
        session.close()
