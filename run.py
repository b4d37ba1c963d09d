"""Entry point for serving the Registry POS API.

Starts the FastAPI application with Uvicorn.  Host and port are read
from the ``HOST`` and ``PORT`` environment variables (see
``registry_pos_api.app.core.config``).  Configuration such as
``APP_PASSWORD``, ``SECRET_KEY`` and the storage backend must be set in
the environment before this script is started.

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from registry_pos_api.app.core.config import settings


async def run_api() -> None:
    """Serve the API until interrupted."""
    config = Config(
        app="registry_pos_api.app.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(run_api())
    except (KeyboardInterrupt, SystemExit):
        pass
