"""
Meal Planner Backend - Application Package Initializer
======================================================

What: Marks the `mealplanner` directory as a Python package.
Who:  Used by uvicorn (`mealplanner.main:app`), Alembic, and pytest.

Architecture Note:
    The backend is a thin orchestration layer over three managed services:

    ┌─────────────────────────────────────┐
    │      Routes + Middleware (HTTP)     │  ← parsing, size cap, CORS, envelopes
    ├─────────────────────────────────────┤
    │        Services (Handlers)          │  ← generation, favorites, cookbooks
    ├─────────────────────────────────────┤
    │   Clients: Gemini │ Blobs │ Docs    │  ← google-generativeai, aiofiles, SQLAlchemy
    └─────────────────────────────────────┘

    Handlers never call each other; each request is one validation step,
    one (or, for uploads, two) external calls, and one JSON response.
"""

__version__ = "1.0.0"
