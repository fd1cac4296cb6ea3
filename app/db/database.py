from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker
from app.core.config import settings
from sqlalchemy.pool import QueuePool, StaticPool
from sqlalchemy.exc import OperationalError
import time
import logging

logger = logging.getLogger(__name__)


def _engine_options(db_url: str) -> dict:
    if db_url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}}
        # In-memory databases live per connection, so share a single one
        if db_url in ("sqlite://", "sqlite:///:memory:"):
            options["poolclass"] = StaticPool
        return options

    return {
        "poolclass": QueuePool,
        "pool_size": settings.DATABASE_POOL_SIZE,
        "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        "pool_timeout": settings.DATABASE_POOL_TIMEOUT,
        "pool_pre_ping": True,
        "pool_recycle": settings.DATABASE_POOL_RECYCLE,
    }


try:
    db_url = settings.DATABASE_URL
    logger.info("Initializing database connection...")

    engine = create_engine(db_url, **_engine_options(db_url))

    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))
        logger.info("Database connection successful")

except Exception as e:
    logger.error(f"Database connection error: {str(e)}")
    raise

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def init_db():
    # Registers the models on Base.metadata
    from app.models import business  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables ensured")


def get_db():
    retries = 3
    retry_delay = 1

    for attempt in range(retries):
        try:
            db = SessionLocal()
            db.execute(text("SELECT 1"))
            break
        except OperationalError:
            db.close()
            if attempt == retries - 1:
                logger.error(f"Database connection failed after {retries} attempts")
                raise
            logger.warning(f"Database connection attempt {attempt + 1} failed, retrying...")
            time.sleep(retry_delay)

    try:
        yield db
    finally:
        db.close()
