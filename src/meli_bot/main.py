"""Mercado Livre Delivery Bot - Main Entry Point."""

import os

from meli_bot.config.settings import settings
from meli_bot.server.app import create_app

# Create FastAPI application
app = create_app()


def run() -> None:
    """Serve the application with uvicorn."""
    import uvicorn

    reload = os.getenv("RELOAD", "false").lower() == "true"

    uvicorn.run(
        "meli_bot.main:app",
        host=settings.host,
        port=settings.port,
        reload=reload,
        log_level=settings.log_level.lower(),
        timeout_graceful_shutdown=120,
        timeout_keep_alive=5,
        access_log=False,  # Structured logging instead of uvicorn access log
    )


if __name__ == "__main__":
    run()
