from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from gold_finance.core.config import DATABASE_URL


def build_engine(url: str = DATABASE_URL):
    # SQLite pools reject the QueuePool sizing arguments
    if url.startswith("sqlite"):
        return create_engine(url, echo=False, future=True)

    return create_engine(
        url,
        echo=False,
        pool_pre_ping=True,  # drops dead connections automatically
        pool_size=5,
        max_overflow=10,
        future=True,
    )


# ---------------------
# SQLAlchemy engine / session / Base
# ---------------------
engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
