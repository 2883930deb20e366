"""
Users API: Application Package Initializer
===========================================

What: Marks the `users_api` directory as a Python package.
Who:  Imported by uvicorn (`uvicorn users_api.main:app`), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes (API Layer)              │  ← HTTP concerns, EnvelopeRoute
    ├─────────────────────────────────────┤
    │     Envelope Layer                  │  ← OutcomeNormalizer + FaultClassifier
    ├─────────────────────────────────────┤
    │     Services (Business Logic)       │  ← in-memory and relational variants
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (Persistence)          │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘

    Every response leaving a route passes through the envelope layer, so the
    client always sees the same JSON shape whichever service produced it.
"""

__version__ = "1.0.0"
