"""FastAPI dependencies."""

import hmac
import logging
from typing import Generator

from fastapi import Header, HTTPException
from sqlalchemy.orm import Session

from actor_engine.core.config import settings
from actor_engine.db.session import SessionLocal


logger = logging.getLogger(__name__)


def get_db() -> Generator[Session, None, None]:
    """
    Database session dependency.

    Yields a database session and ensures it's closed after the request.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def require_internal_secret(x_internal_secret: str | None = Header(None)) -> None:
    """
    Service-to-service trust check on the X-Internal-Secret header.

    Skipped when INTERNAL_SECRET is not configured (local dev).
    """
    expected = settings.INTERNAL_SECRET
    if not expected:
        return
    if not x_internal_secret or not hmac.compare_digest(x_internal_secret, expected):
        logger.warning("Rejected request with invalid internal secret")
        raise HTTPException(status_code=403, detail="Invalid internal secret")
