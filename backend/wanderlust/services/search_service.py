"""
Wanderlust Backend - Search Log Service
=========================================

What:  Stores the free-text questions users ask the planner.
Who:   Called by POST /api/search.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.exceptions import StorageError, ValidationFailedError
from wanderlust.models.itinerary import Search

logger = logging.getLogger(__name__)


def serialize_search(record: Search) -> Dict[str, Any]:
    return {
        "_id": str(record.id),
        "userEmail": record.user_email,
        "question": record.question,
        "createdAt": record.created_at.isoformat() if record.created_at else None,
    }


class SearchService:
    async def record(
        self,
        db: AsyncSession,
        body: Mapping[str, Any],
        authenticated_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Persist one search question and return the stored document.

        The owner email comes from the bearer token when present, otherwise
        from the body's `userEmail`.

        Raises:
            ValidationFailedError: `userEmail` or `question` missing.
            StorageError: the insert failed.
        """
        user_email = authenticated_email or body.get("userEmail")
        question = body.get("question")

        errors: List[str] = []
        if not isinstance(user_email, str) or not user_email.strip():
            errors.append("userEmail")
        if not isinstance(question, str) or not question.strip():
            errors.append("question")
        if errors:
            raise ValidationFailedError(errors)

        search = Search(user_email=user_email, question=question)
        try:
            db.add(search)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("SEARCH SAVE ERROR: %s", str(e))
            raise StorageError(
                message="Server Error while saving search",
                context={"error_type": type(e).__name__},
            )

        logger.info("Search recorded for %s", user_email)
        return serialize_search(search)
