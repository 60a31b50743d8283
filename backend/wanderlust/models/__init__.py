"""ORM models. Importing this package registers every table on Base.metadata."""

from wanderlust.models.itinerary import Itinerary, Search
from wanderlust.models.user import AccountState, User

__all__ = ["AccountState", "Itinerary", "Search", "User"]
