"""
Garden Map Backend — Package Initializer
==========================================

What: Marks the `gardenmap` directory as a Python package.
Who:  Used by uvicorn (`gardenmap.main:app`), pytest, and `python -m gardenmap`.

Architecture Note:
    The backend keeps the same layering for every request:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │      MarkerService (Business Rules) │  ← validation, IDs, merge
    ├─────────────────────────────────────┤
    │        Schemas (API Contract)       │  ← Pydantic models
    ├─────────────────────────────────────┤
    │     MarkerStore (Persistence)       │  ← one JSON file, async I/O
    └─────────────────────────────────────┘

    The `client` subpackage is the map-side controller that talks to the
    routes over HTTP; it does not import the server layers.
"""

__version__ = "1.0.0"
