"""
Wanderlust Backend - Itinerary and Search Schemas
===================================================

What:  Response models for trip submission and the search log.

Request bodies for POST /api/itinerary and POST /api/search are accepted as
plain JSON objects and validated by the services, which report every bad
field at once instead of stopping at the first.
"""

import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class SaveTripResponse(BaseModel):
    success: bool = True
    message: str = "Trip saved successfully"
    tripId: uuid.UUID = Field(description="Identifier of the stored itinerary")


@dataclass(frozen=True)
class ItineraryDraft:
    """A submission that passed validation and normalization, ready to persist."""

    user_email: str
    current_location: str
    destination: str
    budget: float
    days: int
    result: Any
    travelers: int = 1
    interests: List[str] = field(default_factory=list)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    dietary: Optional[str] = None
    map_data: Optional[Any] = None


@dataclass
class HistoryResult:
    """Serialized itineraries plus the ids of records that could not be serialized."""

    items: List[Dict[str, Any]] = field(default_factory=list)
    skipped_ids: List[str] = field(default_factory=list)
