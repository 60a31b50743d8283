"""
Wanderlust Backend - Application Package
=========================================

What: REST backend for the Wanderlust travel planner.
Who:  Imported by uvicorn (via the `wanderlust` console script), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes + Middleware (HTTP)      │  ← status codes, auth gate, CORS
    ├─────────────────────────────────────┤
    │        Services (Business Logic)    │  ← auth flow, itinerary ingest
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
