"""Cliente mínimo para la Cloud API de WhatsApp (envío de mensajes de texto)."""

from __future__ import annotations

from typing import Any

import httpx

from spamguard.channels.whatsapp.schemas import OutboundReply
from spamguard.core.config import Settings
from spamguard.core.logging import get_logger
from spamguard.core.security import mask_secret

logger = get_logger(__name__)


class WhatsAppSenderError(RuntimeError):
    """Falló el envío de un mensaje a la Cloud API."""


def build_messages_url(settings: Settings) -> str:
    if not settings.phone_number_id:
        raise WhatsAppSenderError("PHONE_NUMBER_ID is not configured")
    base_url = settings.graph_api_base_url.rstrip("/")
    return f"{base_url}/{settings.graph_api_version}/{settings.phone_number_id}/messages"


async def send_text_message(reply: OutboundReply, settings: Settings) -> dict[str, Any]:
    """Publica `reply` en el endpoint de mensajes del número configurado.

    Un solo intento, sin reintentos. httpx calcula `Content-Length` y
    `Content-Type` a partir del cuerpo JSON.

    Raises:
        WhatsAppSenderError: Configuración faltante, error de red o status >= 400.
    """
    if not settings.whatsapp_api_token:
        raise WhatsAppSenderError("WHATSAPP_API_TOKEN is not configured")
    url = build_messages_url(settings)
    headers = {"Authorization": f"Bearer {settings.whatsapp_api_token}"}

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            response = await client.post(url, headers=headers, json=reply.to_payload())
    except httpx.RequestError as exc:
        msg = f"Network error sending WhatsApp message: {type(exc).__name__}"
        logger.error(msg, extra={"recipient": mask_secret(reply.recipient)})
        raise WhatsAppSenderError(msg) from exc

    logger.info(
        "whatsapp.send_status",
        extra={"status": response.status_code, "recipient": mask_secret(reply.recipient)},
    )
    if response.status_code >= 400:
        raise WhatsAppSenderError(
            f"WhatsApp API returned {response.status_code}: {response.text[:500]!r}"
        )

    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}
