"""FastAPI application setup and configuration."""

import asyncio
from dataclasses import dataclass
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncEngine

from meli_bot.api.client import MeliAPIClient
from meli_bot.config.settings import Settings, settings
from meli_bot.core.logger import setup_logger
from meli_bot.core.monitoring import init_monitoring
from meli_bot.core.token_manager import TokenManager
from meli_bot.db import (
    CredentialRepository,
    DeliveryLedgerRepository,
    get_engine,
    get_session_factory,
    init_db,
)
from meli_bot.handlers.webhook import DeliveryPipeline
from meli_bot.services.auth_service import AuthorizationFlow
from meli_bot.services.message_rules import MessageRuleTable
from meli_bot.services.message_service import MessageDispatcher
from meli_bot.services.order_service import OrderService

logger = setup_logger(__name__)

# Background pipeline tasks, awaited on shutdown
_pending_tasks = set()


def track_task(task: asyncio.Task) -> None:
    """
    Track a background task for graceful shutdown.

    Args:
        task: The asyncio Task to track
    """
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)


async def drain_pending_tasks() -> None:
    """Wait for every tracked background task to finish."""
    if not _pending_tasks:
        logger.debug("No pending tasks to wait for")
        return

    logger.info(f"Waiting for {len(_pending_tasks)} pending tasks to complete...")
    await asyncio.gather(*list(_pending_tasks), return_exceptions=True)
    logger.info("All pending tasks completed")


@dataclass
class BotServices:
    """Wired components shared by the routes."""

    config: Settings
    engine: AsyncEngine
    api_client: MeliAPIClient
    token_manager: TokenManager
    auth_flow: AuthorizationFlow
    order_service: OrderService
    dispatcher: MessageDispatcher
    pipeline: DeliveryPipeline

    async def close(self) -> None:
        """Close the HTTP client and database connections."""
        await self.api_client.close()
        await self.engine.dispose()


def build_services(
    config: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    rules: Optional[MessageRuleTable] = None,
) -> BotServices:
    """
    Wire storage, API client, credential manager and the delivery pipeline.

    Args:
        config: Application settings
        transport: Optional httpx transport for the marketplace API
        rules: Message rule table (defaults to the built-in table)
    """
    engine = get_engine(config.database_url)
    session_factory = get_session_factory(engine)

    api_client = MeliAPIClient(
        app_id=config.ml_app_id,
        client_secret=config.ml_client_secret,
        redirect_uri=config.ml_redirect_uri,
        api_base_url=config.api_base_url,
        auth_base_url=config.auth_base_url,
        timeout=config.http_timeout_seconds,
        transport=transport,
    )
    token_manager = TokenManager(
        CredentialRepository(session_factory),
        api_client,
        refresh_skew_ms=config.refresh_skew_ms,
    )
    order_service = OrderService(api_client, token_manager)
    dispatcher = MessageDispatcher(api_client, token_manager, rules)
    ledger = DeliveryLedgerRepository(session_factory) if config.dedupe_deliveries else None

    return BotServices(
        config=config,
        engine=engine,
        api_client=api_client,
        token_manager=token_manager,
        auth_flow=AuthorizationFlow(api_client, token_manager),
        order_service=order_service,
        dispatcher=dispatcher,
        pipeline=DeliveryPipeline(order_service, dispatcher, ledger),
    )


def get_services(request: Request) -> BotServices:
    """Dependency returning the application's wired services."""
    return request.app.state.services


def create_app(services: Optional[BotServices] = None) -> FastAPI:
    """Create and configure FastAPI application."""
    app = FastAPI(
        title="Mercado Livre Delivery Bot",
        version="1.0.0",
        description="Receives Mercado Livre order notifications and messages buyers of paid orders",
    )

    init_monitoring(settings.glitchtip_dsn, settings.environment)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.services = services or build_services(settings)

    from meli_bot.server import routes

    app.include_router(routes.router)

    @app.on_event("startup")
    async def startup_db():
        """Create tables on application startup."""
        try:
            logger.info("Initializing database")
            await init_db(app.state.services.engine)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

    @app.on_event("shutdown")
    async def shutdown_handler():
        """
        Gracefully shut down all resources.

        Waits for in-flight order notifications, then closes the HTTP client
        and database connections.
        """
        logger.info("Starting graceful shutdown...")

        try:
            await drain_pending_tasks()
        except Exception as e:
            logger.error(f"Error while waiting for tasks to complete: {e}", exc_info=True)

        try:
            await app.state.services.close()
            logger.info("HTTP client and database connections closed")
        except Exception as e:
            logger.error(f"Error closing resources: {e}", exc_info=True)

        logger.info("Graceful shutdown completed")

    return app
