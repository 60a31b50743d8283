"""
Wanderlust Backend - Services Package
======================================

Business logic layer. Services are built once by the application factory
from Settings and stored on `app.state`; route handlers pass each call its
own database session.
"""
