# backend/database.py
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from config import settings
from utils.errors import PersistenceError

logger = logging.getLogger(__name__)

# 1. Address from settings (.env / environment) with a local SQLite fallback
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL

# 2. Hosting providers hand out postgres:// which SQLAlchemy no longer accepts
if SQLALCHEMY_DATABASE_URL.startswith("postgres://"):
    SQLALCHEMY_DATABASE_URL = SQLALCHEMY_DATABASE_URL.replace("postgres://", "postgresql://", 1)

# 3. Driver specific options
if "sqlite" in SQLALCHEMY_DATABASE_URL:
    connect_args = {"check_same_thread": False} # SQLite only
else:
    connect_args = {}

engine = create_engine(
    SQLALCHEMY_DATABASE_URL, connect_args=connect_args, pool_pre_ping=True
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

@contextmanager
def transaction_scope(db: Session, operation: str = "write"):
    """
    Runs the enclosed writes as one unit of work.

    Commits when the block exits cleanly. Any failure rolls back everything
    written inside the block; SQLAlchemy errors surface as PersistenceError,
    anything else propagates unchanged.
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Transaction %s failed: %s", operation, e)
        raise PersistenceError(f"{operation} failed") from e
    except Exception:
        db.rollback()
        raise

def init_db():
    # Importing the models registers their tables on Base.metadata
    import models.users, models.order, models.favorite, models.log  # noqa: F401
    Base.metadata.create_all(bind=engine)
