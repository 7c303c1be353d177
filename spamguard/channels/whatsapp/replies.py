"""Textos de respuesta que el bot envía por WhatsApp."""

from enum import Enum


class ReplyCategory(str, Enum):
    GREETING = "greeting"
    HELP = "help"
    WARNING = "warning"
    SAFE = "safe"
    UNKNOWN = "unknown"
    FAILURE = "failure"


GREETING_TEXT = (
    "Hello there! How can I assist you today? Feel free to send me any message, "
    "link, or email content, and I'll analyze it for spam."
)
HELP_TEXT = (
    "I am an AI-powered bot designed to help you identify spam. You can forward me "
    "suspicious messages, links, or emails. I will analyze them and tell you if they "
    "seem like a scam or are legitimate."
)
SAFE_TEXT = "✅ This message seems *LEGITIMATE*.\n\nAs always, remain cautious online."
FAILURE_TEXT = "Sorry, I couldn't analyze that message right now."


def compose_reply(category: ReplyCategory, outcome: str | None = None) -> str:
    """Construye el cuerpo del mensaje para la categoría dada.

    `outcome` sólo se usa en las categorías de alerta y desconocida, donde se
    reproduce literalmente el texto del modelo.
    """
    if category is ReplyCategory.GREETING:
        return GREETING_TEXT
    if category is ReplyCategory.HELP:
        return HELP_TEXT
    if category is ReplyCategory.WARNING:
        return (
            f"🚨 *Warning!* This message looks like *{outcome or ''}*.\n\n"
            "Be careful with links, and do not share personal information."
        )
    if category is ReplyCategory.SAFE:
        return SAFE_TEXT
    if category is ReplyCategory.UNKNOWN:
        return f"🤔 Analysis complete. The content appears to be: {outcome or ''}."
    return FAILURE_TEXT
