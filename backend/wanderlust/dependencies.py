"""
Wanderlust Backend - Service Wiring
=====================================

What:  Builds every service from Settings once, and exposes FastAPI
       dependencies that hand them to route handlers.
How:   `ServiceContainer.from_settings()` is called by `create_app()`; the
       container lives on `app.state.services`. Tests can build a container
       with substitutes and attach it the same way.
"""

from dataclasses import dataclass

from fastapi import Request

from wanderlust.config import Settings
from wanderlust.services.auth_service import AuthService
from wanderlust.services.itinerary_service import ItineraryService
from wanderlust.services.passwords import PasswordHasher
from wanderlust.services.search_service import SearchService
from wanderlust.services.tokens import TokenService


@dataclass(frozen=True)
class ServiceContainer:
    tokens: TokenService
    auth: AuthService
    itineraries: ItineraryService
    searches: SearchService

    @classmethod
    def from_settings(cls, settings: Settings) -> "ServiceContainer":
        tokens = TokenService.from_settings(settings)
        return cls(
            tokens=tokens,
            auth=AuthService(hasher=PasswordHasher.from_settings(settings), tokens=tokens),
            itineraries=ItineraryService(),
            searches=SearchService(),
        )


def get_services(request: Request) -> ServiceContainer:
    return request.app.state.services


def get_auth_service(request: Request) -> AuthService:
    return get_services(request).auth


def get_itinerary_service(request: Request) -> ItineraryService:
    return get_services(request).itineraries


def get_search_service(request: Request) -> SearchService:
    return get_services(request).searches
