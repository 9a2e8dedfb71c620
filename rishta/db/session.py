from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool

from rishta.core.config import settings

SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def build_engine(url: str):
    if url.startswith("sqlite"):
        # SQLite is used for local runs and tests; FastAPI serves sync routes from a threadpool
        return create_engine(url, connect_args={"check_same_thread": False})

    # Configure connection pooling to prevent connection exhaustion
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=10,  # Number of connections to maintain persistently
        max_overflow=20,  # Maximum number of connections to create beyond pool_size
        pool_timeout=30,  # Seconds to wait before giving up on getting a connection
        pool_pre_ping=True,  # Verify connections before using them (handles stale connections)
        pool_recycle=3600,  # Recycle connections after 1 hour to prevent stale connections
        echo=False  # Set to True for SQL query logging (useful for debugging)
    )


engine = build_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
