"""
School API Backend — Application Package Initializer
=====================================================

What: Marks the `school_api` directory as a Python package.
Who:  Imported by uvicorn (`school_api.main:app`), Alembic, and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Auth gate (protected routers)     │  ← Bearer token → identity
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Register, login, CRUD
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
