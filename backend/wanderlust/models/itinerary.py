"""
Wanderlust Backend - Itinerary and Search SQLAlchemy Models
=============================================================

What:  ORM models for the `itineraries` and `searches` tables.
Who:   Used by ItineraryService and SearchService.

Table Design:
    - result / map_data: untyped JSON (JSONB on PostgreSQL, TEXT elsewhere).
      The AI-generated plan is opaque to the backend; only the mobile client
      reads its shape. Stored text that no longer decodes is loaded as a
      CorruptDocument instead of failing the whole query.
    - created_at: UTC with timezone; history is served newest first.
    - Index on (user_email, created_at): the only read pattern is
      "all trips for this email, newest first".
"""

import json
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, List, Optional

from sqlalchemy import DateTime, Float, Index, Integer, String, Text, TypeDecorator, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from wanderlust.database import Base


@dataclass(frozen=True)
class CorruptDocument:
    """Stored JSON text that failed to decode; `raw` is the text as found."""

    raw: str
    reason: str


class JSONDocument(TypeDecorator):
    """
    Untyped JSON column: JSONB on PostgreSQL, TEXT elsewhere.

    On TEXT backends decoding happens here, per value, and a value that does
    not decode is returned as a CorruptDocument. The history serializer then
    skips that one record.
    """

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if dialect.name == "postgresql" or value is None:
            return value
        return json.dumps(value)

    def process_result_value(self, value, dialect):
        if dialect.name == "postgresql" or value is None:
            return value
        try:
            return json.loads(value)
        except (TypeError, ValueError) as e:
            return CorruptDocument(raw=str(value), reason=str(e))


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Itinerary(Base):
    """
    A saved trip plan.

    Lifecycle:
        Created once per submission; never updated or deleted by the API.
    """

    __tablename__ = "itineraries"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_email: Mapped[str] = mapped_column(String(320), nullable=False)

    # Origin of the trip, named after the field the mobile client sends.
    current_location: Mapped[str] = mapped_column(String(255), nullable=False)
    destination: Mapped[str] = mapped_column(String(255), nullable=False)

    start_date: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    end_date: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    travelers: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    budget: Mapped[float] = mapped_column(Float, nullable=False)
    days: Mapped[int] = mapped_column(Integer, nullable=False)

    interests: Mapped[List[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    dietary: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    result: Mapped[Any] = mapped_column(JSONDocument, nullable=False)
    map_data: Mapped[Optional[Any]] = mapped_column(JSONDocument, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )

    __table_args__ = (
        Index("idx_itineraries_user_created", "user_email", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Itinerary(id={self.id}, user_email='{self.user_email}', "
            f"destination='{self.destination}')>"
        )


class Search(Base):
    """A free-text question a user asked the planner. Write-only."""

    __tablename__ = "searches"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    user_email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
