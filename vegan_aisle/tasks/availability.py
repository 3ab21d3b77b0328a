"""Celery tasks for availability upkeep."""

import logging

from sqlalchemy.orm import Session

from vegan_aisle.celery_app import app as celery_app
from vegan_aisle.database import SessionLocal
from vegan_aisle.services.availability import mark_stale

logger = logging.getLogger(__name__)


@celery_app.task
def mark_stale_availability(product_id: str | None = None) -> dict:
    """Flag availability rows that have not been confirmed recently.

    This task runs hourly via celery-beat.

    Returns:
        dict with the number of rows flagged
    """
    db: Session = SessionLocal()
    try:
        flagged = mark_stale(db, product_id)
        if flagged:
            logger.info(f"Marked {flagged} availability rows stale")
        return {"flagged": flagged}
    except Exception:
        db.rollback()
        logger.exception("Failed to mark stale availability")
        raise
    finally:
        db.close()
