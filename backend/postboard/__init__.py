"""
Postboard Backend — Application Package Initializer
===================================================

What: Marks the `postboard` directory as a Python package.
Why:  Enables module imports like `from postboard.config import settings`.
Who:  Used implicitly by Python's import system and explicitly by Alembic, pytest, and uvicorn.

Architecture Note:
    The backend follows a layered architecture:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (PostService)      │  ← Validation, one statement per call
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Engine, sessions, migrations
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
