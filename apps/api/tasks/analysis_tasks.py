"""
Reflection Analysis Task

POST /v1/reflections commits the reflection, responds, and enqueues
`tasks.generate_reflection_analysis` via enqueue_analysis_generation().
The request never waits on the model.

Task contract:
- One run per enqueue; no retries (a failed generation is simply absent)
- Never raises: every outcome is a status dict for monitoring
- Own database session, independent of the request that enqueued it
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from celery import Task
from sqlalchemy.orm import Session

from tasks import celery_app
from core.database import get_db_sync
from services.analysis_orchestrator import generate_analysis_for_reflection
from services.model_gateway import get_model_gateway

logger = logging.getLogger(__name__)


@celery_app.task(
    name="tasks.generate_reflection_analysis",
    bind=True,
    max_retries=0,
)
def generate_reflection_analysis_task(self: Task, user_id: str, reflection_id: str) -> Dict:
    """Generate and store the analysis for one reflection."""
    db: Optional[Session] = None
    try:
        db = get_db_sync()
        result = generate_analysis_for_reflection(
            db,
            user_id=UUID(user_id),
            reflection_id=UUID(reflection_id),
            gateway=get_model_gateway(),
        )
        return result.as_dict()
    except Exception as e:
        if db is not None:
            db.rollback()
        logger.error(
            f"Reflection analysis task failed for {reflection_id}: {e}",
            exc_info=True,
            extra={
                "extra_fields": {
                    "user_id": user_id,
                    "reflection_id": reflection_id,
                }
            },
        )
        return {
            "status": "error",
            "user_id": user_id,
            "reflection_id": reflection_id,
            "reason": type(e).__name__,
        }
    finally:
        if db is not None:
            db.close()


def enqueue_analysis_generation(user_id, reflection_id) -> bool:
    """
    Fire-and-forget enqueue after a reflection is committed.

    Returns False (and logs) if the broker is unreachable; the reflection
    submission still succeeds.
    """
    try:
        generate_reflection_analysis_task.delay(str(user_id), str(reflection_id))
    except Exception as e:
        logger.error(f"Failed to enqueue analysis for reflection {reflection_id}: {e}")
        return False

    logger.info(f"Analysis generation enqueued for reflection {reflection_id}")
    return True
