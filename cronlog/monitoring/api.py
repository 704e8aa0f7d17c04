"""
Cronlog Monitor - Read-Only HTTP API

Exposes stored operation results via HTTP endpoints.
This API is STRICTLY READ-ONLY: results are written only by
`cronlog capture`.

Security Warning:
-----------------
No authentication is implemented. Bind to localhost unless the
network is trusted.
"""

from typing import Optional

from fastapi import FastAPI

from cronlog import __version__
from cronlog.config import Settings
from cronlog.storage import ResultStore
from . import server as monitoring


def create_app(
    store: ResultStore,
    settings: Optional[Settings] = None,
    version: str = __version__,
) -> FastAPI:
    """
    Create the read-only monitoring API application.

    Args:
        store: Result store to read from
        settings: Runtime settings (page size, application colours)
        version: Version string reported by /health

    Returns:
        FastAPI application with read-only endpoints
    """
    app = FastAPI(
        title="Cronlog",
        description="Read-only history of scheduled command executions.",
        version=version,
    )

    app.state.store = store
    app.state.settings = settings or Settings()
    app.state.version = version

    app.include_router(monitoring.router)
    return app


def run_server(settings: Settings, store: Optional[ResultStore] = None) -> None:
    """
    Run the monitoring API server until interrupted.

    uvicorn handles SIGINT/SIGTERM and drains open connections.
    The store is closed once the server has stopped.

    Args:
        settings: Runtime settings (host, port, database path)
        store: Store to serve; opened from settings if not provided

    Raises:
        StorageError: If the store cannot be opened
    """
    import uvicorn

    store = store or ResultStore.from_settings(settings)
    app = create_app(store, settings)

    print("Starting Cronlog server (read-only)")
    print(f"Version: {__version__}")
    print(f"Database: {settings.db_path}")
    print(f"Binding to: {settings.host}:{settings.port}")

    try:
        uvicorn.run(app, host=settings.host, port=settings.port, log_config=None)
    finally:
        store.close()
        print("Graceful shutdown complete.")
