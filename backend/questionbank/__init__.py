"""
Questions Unlimited Backend: Application Package Initializer
=============================================================

What: Marks the `questionbank` directory as a Python package.
Who:  Used by uvicorn (`questionbank.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is split into the same layers on every request path:

    ┌─────────────────────────────────────┐
    │     Routes (API + page layer)       │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Services (question/answer rules)  │  ← pagination, tag linkage
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   QuestionBank (engine + sessions)  │  ← one per running app
    └─────────────────────────────────────┘

    Routes never build SQL; services never see HTTP status codes.
"""

__version__ = "1.0.0"
