"""
CatRouter - Application Package Initializer
===========================================

What: Marks the `catrouter` directory as a Python package.
Who:  Used by uvicorn (`catrouter.main:app`), `python -m catrouter`, and pytest.

Architecture Note:
    The package is a pluggable route module plus the thin host it plugs into:

    ┌─────────────────────────────────────┐
    │   Host (FastAPI app + HostServer)   │  ← use() / remove_middleware()
    ├─────────────────────────────────────┤
    │     Route module (CatRouter)        │  ← load() / unload() lifecycle
    ├─────────────────────────────────────┤
    │   Upload services (storage, check)  │  ← disk writes via aiofiles
    └─────────────────────────────────────┘

    The route module never reaches for globals: the host is handed to
    `load()` and the storage configuration to the constructor.
"""

__version__ = "1.0.0"
