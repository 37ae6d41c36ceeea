from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from quizgen.core.config import get_settings


class Base(DeclarativeBase):
    pass


settings = get_settings()
engine = create_engine(settings.db_url, pool_pre_ping=True, future=True)
SessionLocal = sessionmaker(
    bind=engine, autoflush=False, autocommit=False, expire_on_commit=False, future=True
)


def init_db() -> None:
    """Create quiz tables that do not exist yet. Material tables are owned elsewhere."""
    from quizgen.db.models import progress, quiz  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
