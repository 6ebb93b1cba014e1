"""Telegram webhook route."""

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, Request

from api.dependencies.webhook import SECRET_HEADER, WebhookSecret, verify_secret_token
from api.v1.dependencies import (
    get_dispatch_service,
    get_ingest_service,
    get_telegram_client,
)
from api.v1.schemas.common import ErrorResponse
from api.v1.schemas.telegram import WebhookResponse, parse_update
from core.config import Settings, get_settings
from domain.entities.inbound import WebhookStatus
from domain.services.access_policy import is_username_allowed
from domain.services.dispatch_service import DispatchService
from domain.services.ingest_service import IngestService
from infrastructure.telegram.client import TelegramClient

logger = structlog.get_logger()

router = APIRouter(prefix="/telegram", tags=["telegram"])


@router.post(
    "/webhook",
    response_model=WebhookResponse,
    summary="Receive a Telegram update",
    responses={
        400: {"model": ErrorResponse, "description": "Update fits neither envelope"},
        403: {"model": ErrorResponse, "description": "Secret token missing or wrong"},
        500: {"model": ErrorResponse, "description": "Identity, profile or chat setup failed"},
        503: {"model": ErrorResponse, "description": "Webhook secret not configured"},
    },
)
async def telegram_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    secret: WebhookSecret,
    settings: Settings = Depends(get_settings),
    telegram: TelegramClient = Depends(get_telegram_client),
    ingest: IngestService = Depends(get_ingest_service),
    dispatcher: DispatchService = Depends(get_dispatch_service),
) -> WebhookResponse:
    """
    Accept an update from Telegram and acknowledge it right away.

    Updates from senders still onboarding run the timezone dialogue; all
    others are handed to the processing service after the response is sent.
    """
    update = parse_update(await request.body())
    verify_secret_token(request.headers.get(SECRET_HEADER), secret)

    intent = update.to_intent()
    structlog.contextvars.bind_contextvars(
        update_id=update.update_id,
        telegram_user_id=intent.sender.id,
    )

    if intent.callback_query_id:
        await telegram.answer_callback_query(intent.callback_query_id)

    if not intent.is_processable:
        return WebhookResponse(status=WebhookStatus.RECEIVED_NOT_PROCESSED)

    if not is_username_allowed(intent.sender.username, settings.allowed_usernames_list):
        logger.info("webhook_sender_not_allowed")
        return WebhookResponse(status=WebhookStatus.UNAUTHORIZED_USER)

    outcome = await ingest.handle(intent)

    if outcome.dispatch_request is not None and outcome.identity is not None:
        background_tasks.add_task(
            dispatcher.dispatch, outcome.dispatch_request, outcome.identity
        )

    return WebhookResponse(status=outcome.status)
