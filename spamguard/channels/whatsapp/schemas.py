"""Esquemas Pydantic para mensajes de WhatsApp Cloud API."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class InboundMessage(BaseModel):
    """Primer mensaje extraído de un webhook entrante."""

    model_config = ConfigDict(frozen=True)

    sender: str
    text: str = ""
    kind: Literal["text", "other"] = "text"


class OutboundReply(BaseModel):
    """Respuesta de texto lista para enviarse al remitente."""

    model_config = ConfigDict(frozen=True)

    recipient: str
    body: str
    link_preview: bool = True

    def to_payload(self) -> dict[str, Any]:
        """Sobre JSON que espera el endpoint `/{phone_number_id}/messages`."""
        return {
            "messaging_product": "whatsapp",
            "to": self.recipient,
            "type": "text",
            "text": {"preview_url": self.link_preview, "body": self.body},
        }


class WebhookAck(BaseModel):
    """Confirmación que se devuelve siempre a Meta."""

    status: str = Field(default="ok")
