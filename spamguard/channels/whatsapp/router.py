"""Endpoints del webhook de WhatsApp Cloud API."""

import json

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.responses import PlainTextResponse

from spamguard.core.config import Settings
from spamguard.core.logging import get_logger
from spamguard.core.security import SignatureError, tokens_match, verify_signature

from . import service
from .deps import get_app_settings
from .schemas import WebhookAck

logger = get_logger("spamguard.channels.whatsapp")

router = APIRouter(tags=["whatsapp"])


@router.get("/", response_class=PlainTextResponse, summary="Verificación de suscripción")
async def verify_webhook(
    hub_mode: str | None = Query(default=None, alias="hub.mode"),
    hub_verify_token: str | None = Query(default=None, alias="hub.verify_token"),
    hub_challenge: str | None = Query(default=None, alias="hub.challenge"),
    settings: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    """Responde el handshake de Meta devolviendo `hub.challenge`."""
    if not hub_mode or not hub_verify_token:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing hub.mode or hub.verify_token",
        )

    if hub_mode != "subscribe" or not tokens_match(settings.verify_token, hub_verify_token):
        logger.warning("whatsapp.verification_rejected", extra={"mode": hub_mode})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    logger.info("whatsapp.webhook_verified")
    return PlainTextResponse(hub_challenge or "")


@router.post("/", response_model=WebhookAck, summary="Webhook de recepción WhatsApp")
async def receive_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_app_settings),
) -> WebhookAck:
    """Procesa mensajes entrantes y siempre responde 200.

    Meta reintenta agresivamente ante cualquier status distinto de 2xx, así que
    los errores internos sólo se registran. El envío de la respuesta se agenda
    como tarea en segundo plano.
    """
    body = await request.body()

    if settings.app_secret:
        try:
            verify_signature(settings.app_secret, body, request.headers.get("x-hub-signature-256"))
        except SignatureError as exc:
            logger.warning("whatsapp.signature_rejected", extra={"error": str(exc)})
            return WebhookAck()

    try:
        payload = json.loads(body)
    except ValueError:
        logger.warning("whatsapp.invalid_json", extra={"payload_size": len(body)})
        return WebhookAck()

    try:
        reply = await service.handle_payload(payload, settings)
    except Exception:
        logger.exception("whatsapp.processing_failed")
        return WebhookAck()

    if reply is not None:
        background_tasks.add_task(service.deliver_reply, reply, settings)
    return WebhookAck()
