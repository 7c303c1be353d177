"""Servicios del canal WhatsApp: extracción, ruteo y entrega de respuestas."""

from __future__ import annotations

from typing import Any

from spamguard.core.config import Settings
from spamguard.core.logging import get_logger, log_event
from spamguard.core.security import mask_secret
from spamguard.services import gemini as gemini_service
from spamguard.services import whatsapp as whatsapp_service

from .replies import ReplyCategory, compose_reply
from .schemas import InboundMessage, OutboundReply

logger = get_logger("spamguard.channels.whatsapp")

WHATSAPP_OBJECT = "whatsapp_business_account"

GREETINGS = frozenset({"hi", "hello", "hey"})
HELP_REQUESTS = frozenset({"help", "info"})


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def extract_inbound_message(payload: Any) -> InboundMessage | None:
    """Obtiene el primer mensaje de `entry[0].changes[0].value.messages[0]`.

    Retorna `None` cuando el payload no trae un mensaje aplicable: objeto
    distinto a `whatsapp_business_account`, cualquier eslabón faltante o con
    tipo inesperado, o mensaje sin remitente. Los mensajes que no son de texto
    se devuelven con `kind="other"`.
    """
    if not isinstance(payload, dict) or payload.get("object") != WHATSAPP_OBJECT:
        return None

    entry = _first(payload.get("entry"))
    changes = _first(entry.get("changes")) if isinstance(entry, dict) else None
    value = changes.get("value") if isinstance(changes, dict) else None
    message = _first(value.get("messages")) if isinstance(value, dict) else None
    if not isinstance(message, dict):
        return None

    sender = message.get("from")
    if not isinstance(sender, str) or not sender:
        return None

    if message.get("type") != "text":
        return InboundMessage(sender=sender, kind="other")

    text_obj = message.get("text")
    body = text_obj.get("body") if isinstance(text_obj, dict) else None
    if not isinstance(body, str):
        return None
    return InboundMessage(sender=sender, text=body, kind="text")


def canned_category(text: str) -> ReplyCategory | None:
    """Ruteo por coincidencia exacta (sin mayúsculas ni espacios extremos)."""
    normalized = text.strip().lower()
    if normalized in GREETINGS:
        return ReplyCategory.GREETING
    if normalized in HELP_REQUESTS:
        return ReplyCategory.HELP
    return None


async def analyze_text(text: str, settings: Settings) -> str:
    """Clasifica `text` y retorna el cuerpo de respuesta; nunca propaga errores."""
    try:
        result = await gemini_service.classify_message(text, settings)
    except gemini_service.ClassifierError as exc:
        logger.warning(
            "whatsapp.analysis_failed",
            extra={"error_type": type(exc).__name__, "error": str(exc)},
        )
        return compose_reply(ReplyCategory.FAILURE)

    if result.is_warning:
        return compose_reply(ReplyCategory.WARNING, result.outcome)
    if result.verdict is gemini_service.Verdict.LEGITIMATE:
        return compose_reply(ReplyCategory.SAFE)
    return compose_reply(ReplyCategory.UNKNOWN, result.outcome)


async def build_reply(message: InboundMessage, settings: Settings) -> OutboundReply | None:
    """Decide la respuesta para un mensaje entrante; `None` si no aplica."""
    if message.kind != "text":
        log_event(logger, "whatsapp.message_ignored", reason="non_text")
        return None

    category = canned_category(message.text)
    if category is not None:
        log_event(
            logger,
            "whatsapp.canned_reply",
            category=category.value,
            sender=mask_secret(message.sender),
        )
        body = compose_reply(category)
    else:
        log_event(
            logger,
            "whatsapp.analyzing_message",
            sender=mask_secret(message.sender),
            text_length=len(message.text),
        )
        body = await analyze_text(message.text, settings)

    return OutboundReply(
        recipient=message.sender,
        body=body,
        link_preview=settings.link_preview,
    )


async def handle_payload(payload: Any, settings: Settings) -> OutboundReply | None:
    """Procesa un webhook ya decodificado y retorna la respuesta a enviar."""
    message = extract_inbound_message(payload)
    if message is None:
        logger.debug("whatsapp.payload_without_message")
        return None
    return await build_reply(message, settings)


async def deliver_reply(reply: OutboundReply, settings: Settings) -> None:
    """Envía la respuesta; los fallos se registran y no se reintentan."""
    try:
        await whatsapp_service.send_text_message(reply, settings)
    except whatsapp_service.WhatsAppSenderError as exc:
        logger.error(
            "whatsapp.send_failed",
            extra={"recipient": mask_secret(reply.recipient), "error": str(exc)},
        )
        return
    log_event(logger, "whatsapp.reply_sent", recipient=mask_secret(reply.recipient))
