import time

import structlog
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from storefront.config import settings

logger = structlog.get_logger(__name__)

engine = create_engine(settings.database_url, future=True)
SessionLocal = sessionmaker(bind=engine, expire_on_commit=False, future=True)
Base = declarative_base()


def init_db(attempts: int = 30) -> None:
    # orm classes must be registered on Base before create_all
    from storefront.store import orm  # noqa: F401

    for attempt in range(attempts):
        try:
            Base.metadata.create_all(bind=engine)
            return
        except Exception as exc:
            logger.warning("database not ready", attempt=attempt + 1, error=str(exc))
            time.sleep(1)
    raise RuntimeError(f"Could not initialize database after {attempts} attempts")
