"""Entry point for the Forum Post API.

Serves the FastAPI application with uvicorn.  Host and port are read
from the ``HOST`` and ``PORT`` environment variables (defaults
``0.0.0.0`` and ``8000``); see ``forum_api.app.core.config`` for the
remaining settings.

Usage:
    python run.py
"""
import asyncio

from uvicorn import Config, Server

from forum_api.app.core.config import settings
from forum_api.app.main import app


async def main() -> None:
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass
