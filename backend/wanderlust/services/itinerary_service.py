"""
Wanderlust Backend - Itinerary Service (Ingest & History)
===========================================================

What:  Validates, normalizes and stores trip submissions; serves a user's
       trip history.
Who:   Called by the /api/itinerary route handlers.

Submit Flow (POST /api/itinerary):
    ┌───────────┐    ┌────────────┐    ┌─────────────┐    ┌──────────┐
    │  Resolve  │───▶│  Validate  │───▶│  Normalize  │───▶│  Store   │
    │ email/dest│    │ (all errs) │    │ result/nums │    │  (DB)    │
    └───────────┘    └────────────┘    └─────────────┘    └──────────┘

    Validation collects EVERY missing or invalid field before failing, in a
    fixed order: userEmail, currentLocation, destination, result,
    days (must be a number), budget (must be a number), mapData.

History Flow (GET /api/itinerary/{email}):
    Each stored record goes through `serialize_itinerary()`, which returns
    either a JSON-ready dict or a SerializationFailure. Failures are
    excluded and their ids logged so an operator can clean them up; one
    corrupt row never takes down the whole response.
"""

import json
import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wanderlust.database import DocumentValidationError
from wanderlust.exceptions import StorageError, ValidationFailedError
from wanderlust.models.itinerary import CorruptDocument, Itinerary
from wanderlust.schemas.itinerary import HistoryResult, ItineraryDraft

logger = logging.getLogger(__name__)

# Log previews of the AI payload are cut to this many characters.
RESULT_PREVIEW_CHARS = 100

# Largest value an INTEGER column holds on every supported backend.
INTEGER_COLUMN_MAX = 2**31 - 1


# ══════════════════════════════════════════════════════════════════════════
# Coercion Helpers
# ══════════════════════════════════════════════════════════════════════════

def coerce_number(value: Any) -> Optional[float]:
    """
    Interpret `value` as a finite number.

    Accepts ints, floats and numeric strings ("1500", " 3.5 "). Returns None
    for missing values, booleans, blank or non-numeric strings, NaN and
    infinities.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        if isinstance(value, (int, float)):
            number = float(value)
        elif isinstance(value, str) and value.strip():
            number = float(value.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    return number if math.isfinite(number) else None


def is_strict_json(value: Any) -> bool:
    """True when `value` encodes as standard JSON (no NaN/Infinity, JSON types only)."""
    try:
        json.dumps(value, allow_nan=False)
    except (TypeError, ValueError):
        return False
    return True


def parse_result(raw: Any) -> Any:
    """
    Decode a `result` that arrived as a JSON string.

    The payload is opaque here, so a string that is not valid JSON (or that
    decodes to null or to non-standard JSON such as NaN) is kept verbatim
    instead of rejecting the submission.
    """
    if not isinstance(raw, str):
        return raw
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.warning("Result is not a valid JSON string, storing as is.")
        return raw
    if parsed is None or not is_strict_json(parsed):
        return raw
    return parsed


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def summarize_submission(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Copy of `body` safe for debug logs: a long string `result` is truncated."""
    summary = dict(body)
    result = summary.get("result")
    if isinstance(result, str) and len(result) > RESULT_PREVIEW_CHARS:
        summary["result"] = result[:RESULT_PREVIEW_CHARS] + "... [TRUNCATED]"
    elif result is not None and not isinstance(result, str):
        summary["result"] = f"<{type(result).__name__}>"
    return summary


# ══════════════════════════════════════════════════════════════════════════
# Submission Validation
# ══════════════════════════════════════════════════════════════════════════

def build_draft(body: Mapping[str, Any], authenticated_email: Optional[str]) -> ItineraryDraft:
    """
    Validate and normalize a submission body.

    Raises:
        ValidationFailedError listing every missing or invalid field.
    """
    user_email = authenticated_email or body.get("userEmail")
    current_location = body.get("currentLocation")
    destination = body.get("destination") or body.get("goingDestination")
    raw_result = body.get("result")
    map_data = body.get("mapData")
    days = coerce_number(body.get("days"))
    budget = coerce_number(body.get("budget"))

    result = parse_result(raw_result)

    errors: List[str] = []
    if not _present(user_email):
        errors.append("userEmail")
    if not _present(current_location):
        errors.append("currentLocation")
    if not _present(destination):
        errors.append("destination")
    if not _present(raw_result):
        errors.append("result")
    elif not is_strict_json(result):
        errors.append("result (must be JSON-serializable)")
    if days is None or abs(days) > INTEGER_COLUMN_MAX:
        errors.append("days (must be a number)")
    if budget is None:
        errors.append("budget (must be a number)")
    if map_data is not None and not is_strict_json(map_data):
        errors.append("mapData (must be JSON-serializable)")

    if errors:
        raise ValidationFailedError(errors)

    travelers = coerce_number(body.get("travelers"))
    if travelers is None or not 1 <= travelers <= INTEGER_COLUMN_MAX:
        travelers = 1
    interests = body.get("interests")

    return ItineraryDraft(
        user_email=str(user_email),
        current_location=str(current_location),
        destination=str(destination),
        budget=budget,
        days=int(days),
        result=result,
        travelers=int(travelers),
        interests=[str(i) for i in interests] if isinstance(interests, list) else [],
        start_date=_optional_text(body.get("startDate")),
        end_date=_optional_text(body.get("endDate")),
        dietary=_optional_text(body.get("dietary")),
        map_data=map_data,
    )


# ══════════════════════════════════════════════════════════════════════════
# History Serialization
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SerializationFailure:
    record_id: str
    reason: str


def serialize_itinerary(record: Any) -> Union[Dict[str, Any], SerializationFailure]:
    """
    Convert one stored itinerary into its wire document.

    Returns a SerializationFailure instead of raising when the record cannot
    be rendered as strict JSON (corrupt payload, unexpected types).
    """
    record_id = str(getattr(record, "id", "unknown"))
    try:
        for column in ("result", "map_data", "interests"):
            value = getattr(record, column)
            if isinstance(value, CorruptDocument):
                raise ValueError(f"stored {column} is not valid JSON ({value.reason})")
        created_at = record.created_at
        document = {
            "_id": record_id,
            "userEmail": record.user_email,
            "currentLocation": record.current_location,
            "destination": record.destination,
            "startDate": record.start_date,
            "endDate": record.end_date,
            "travelers": record.travelers,
            "budget": record.budget,
            "days": record.days,
            "interests": list(record.interests or []),
            "dietary": record.dietary,
            "result": record.result,
            "mapData": record.map_data,
            "createdAt": created_at.isoformat() if created_at is not None else None,
        }
        json.dumps(document, allow_nan=False)
    except (AttributeError, TypeError, ValueError) as e:
        return SerializationFailure(record_id=record_id, reason=f"{type(e).__name__}: {e}")
    return document


def collect_serializable(records: Sequence[Any]) -> HistoryResult:
    """Serialize `records` in order, setting aside the ones that fail."""
    history = HistoryResult()
    for outcome in map(serialize_itinerary, records):
        if isinstance(outcome, SerializationFailure):
            logger.error("[GET HISTORY] Skipping corrupted trip %s: %s", outcome.record_id, outcome.reason)
            history.skipped_ids.append(outcome.record_id)
        else:
            history.items.append(outcome)
    return history


# ══════════════════════════════════════════════════════════════════════════
# Service
# ══════════════════════════════════════════════════════════════════════════

class ItineraryService:
    """
    Business logic layer for itineraries.

    Responsibilities:
        - submit():  validate → normalize → store, returns the new trip id
        - history(): all trips for an email, newest first, corrupt rows skipped
    """

    async def submit(
        self,
        db: AsyncSession,
        body: Mapping[str, Any],
        authenticated_email: Optional[str] = None,
    ):
        logger.debug("[SAVE TRIP] Request body: %s", summarize_submission(body))
        try:
            draft = build_draft(body, authenticated_email)
        except ValidationFailedError as e:
            logger.warning("[SAVE TRIP] Missing or invalid fields: %s", ", ".join(e.fields))
            raise

        record = await self.save_draft(db, draft)
        logger.info("[SAVE TRIP] Trip saved: %s for %s", record.id, draft.user_email)
        return record.id

    async def save_draft(self, db: AsyncSession, draft: ItineraryDraft) -> Itinerary:
        """
        Persist a normalized draft.

        Raises:
            ValidationFailedError: the store rejected the row (required column missing).
            StorageError: any other persistence failure.
        """
        record = Itinerary(**asdict(draft))
        try:
            db.add(record)
            await db.flush()
        except DocumentValidationError as e:
            logger.error("[SAVE TRIP] Database validation failed: %s", e.errors)
            raise ValidationFailedError(e.errors, message="Database validation failed")
        except SQLAlchemyError as e:
            logger.error("[SAVE TRIP] Save failed: %s", str(e), exc_info=True)
            raise StorageError(
                message="Server Error while saving itinerary",
                context={"error_type": type(e).__name__},
            )
        return record

    async def history(self, db: AsyncSession, email: str) -> HistoryResult:
        logger.info("[GET HISTORY] Request for email: %s", email)
        try:
            result = await db.execute(
                select(Itinerary)
                .where(Itinerary.user_email == email)
                .order_by(Itinerary.created_at.desc())
            )
            records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("[GET HISTORY] Database error: %s", str(e), exc_info=True)
            raise StorageError(
                message="Failed to fetch trip history",
                context={"email": email, "error_type": type(e).__name__},
            )

        if not isinstance(records, (list, tuple)):
            logger.warning("[GET HISTORY] Database returned non-list result: %s", type(records).__name__)
            return HistoryResult()

        history = collect_serializable(records)
        logger.info("[GET HISTORY] Found %d trips for %s", len(records), email)
        if history.skipped_ids:
            logger.warning(
                "[GET HISTORY] Filtered %d corrupted trips: %s (delete them manually from the database)",
                len(history.skipped_ids),
                ", ".join(history.skipped_ids),
            )
        return history
