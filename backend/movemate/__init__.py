"""
MoveMate Backend — Application Package Initializer
===================================================

What: Marks the `movemate` directory as a Python package.
Who:  Imported by uvicorn (movemate.main:app), Alembic and pytest.

Architecture Note:
    The driver-side request/estimate core is layered like this:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP, auth header, query params
    ├─────────────────────────────────────┤
    │     DriverRequestService (facade)   │  ← eligibility → match → decide
    ├─────────────────────────────────────┤
    │  Matcher / Decision Engine / etc.   │  ← pure rules, no SQL
    ├─────────────────────────────────────┤
    │   DriverRequestRepository (SQL)     │  ← the only code that queries
    ├─────────────────────────────────────┤
    │  Models & Schemas / Database        │  ← SQLAlchemy ORM + Pydantic
    └─────────────────────────────────────┘

    The repository is passed into the services explicitly, so every rule
    above it can be exercised against a mock without a database.
"""

__version__ = "1.0.0"
