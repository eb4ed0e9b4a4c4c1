"""API routes for the OAuth flow and webhook intake."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse

from meli_bot.core.errors import MeliBotError
from meli_bot.core.logger import setup_logger
from meli_bot.handlers.webhook import handle_webhook_event
from meli_bot.server.app import BotServices, get_services, track_task

logger = setup_logger(__name__)
router = APIRouter()

CALLBACK_SUCCESS_HTML = (
    "<h1>SUCESSO!</h1> <p>Robô autenticado. Pode fechar esta janela.</p>"
)


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    """Liveness indicator."""
    return "O Robô Refrigerista está ONLINE! 🚀"


@router.get("/health")
async def health_check(services: BotServices = Depends(get_services)) -> dict:
    """Health check endpoint for monitoring."""
    health_status = {
        "status": "healthy",
        "service": "meli-delivery-bot",
        "checks": {},
    }

    try:
        credential = await services.token_manager.load_credential()
        if credential is None:
            health_status["checks"]["credential"] = "missing"
            health_status["status"] = "degraded"
        elif services.token_manager.is_expired(credential):
            health_status["checks"]["credential"] = "refresh_due"
        else:
            health_status["checks"]["credential"] = "ok"
    except Exception as e:
        logger.error(f"Health check could not read credential: {e}")
        health_status["checks"]["credential"] = "unavailable"
        health_status["status"] = "unhealthy"

    env_checks = {
        "ml_app_id": "ok" if services.config.ml_app_id else "missing",
        "ml_client_secret": "ok" if services.config.ml_client_secret else "missing",
        "ml_redirect_uri": "ok" if services.config.ml_redirect_uri else "missing",
    }
    if any(v == "missing" for v in env_checks.values()) and health_status["status"] == "healthy":
        health_status["status"] = "degraded"

    health_status["checks"]["environment"] = env_checks
    return health_status


@router.get("/auth")
async def authorize(services: BotServices = Depends(get_services)) -> RedirectResponse:
    """Redirect the seller to the Mercado Livre authorization page."""
    return RedirectResponse(services.auth_flow.build_authorization_redirect(), status_code=302)


@router.get("/callback")
async def oauth_callback(
    code: str | None = None,
    services: BotServices = Depends(get_services),
):
    """Complete the OAuth exchange and persist the first credential."""
    try:
        await services.auth_flow.handle_callback(code)
    except MeliBotError as e:
        logger.error(f"Authorization callback failed: {e}")
        return PlainTextResponse(f"Erro: {e}", status_code=500)
    except Exception as e:
        logger.error(f"Unexpected error in authorization callback: {e}", exc_info=True)
        return PlainTextResponse(f"Erro: {e}", status_code=500)

    return HTMLResponse(CALLBACK_SUCCESS_HTML)


@router.post("/notifications", response_class=PlainTextResponse)
async def notifications(
    request: Request,
    services: BotServices = Depends(get_services),
) -> str:
    """
    Mercado Livre notification endpoint.

    Always answers 200 "OK" right away. Order notifications are processed by
    a background task the request never waits on.
    """
    try:
        raw_body = await request.body()
        task = handle_webhook_event(raw_body, services.pipeline)
        if task is not None:
            track_task(task)
    except Exception as e:
        logger.error(f"Notification intake error: {e}", exc_info=True)

    return "OK"
