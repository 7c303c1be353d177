"""Clasificación de mensajes vía la API REST de Gemini (`generateContent`).

El modelo recibe una instrucción fija y debe contestar con una sola palabra
(`SPAM`, `SCAM` o `LEGITIMATE`). La respuesta no está garantizada, así que la
categoría se deriva por substring sobre el texto devuelto.

Limitación conocida: una respuesta verbosa como "This is NOT SPAM" contiene
`SPAM` y cae en la categoría de alerta.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx

from spamguard.core.config import Settings
from spamguard.core.logging import get_logger

logger = get_logger(__name__)

PROMPT_TEMPLATE = (
    "Analyze the following message to determine if it is spam, a scam, or legitimate. "
    "Consider common spam tactics like urgency, suspicious links, and unusual requests. "
    "Respond with only one of these three words: SPAM, SCAM, or LEGITIMATE."
    '\n\nMessage: "{message}"'
)

NOT_CONFIGURED_MESSAGE = "Could not analyze the message. Bot is not configured correctly."


class ClassifierError(RuntimeError):
    """Error base del clasificador."""


class ClassifierUnavailableError(ClassifierError):
    """No fue posible contactar al servicio de análisis."""


class ClassifierResponseError(ClassifierError):
    """La respuesta de Gemini no tiene la forma esperada."""


class Verdict(str, Enum):
    SPAM = "SPAM"
    SCAM = "SCAM"
    LEGITIMATE = "LEGITIMATE"
    UNKNOWN = "UNKNOWN"


@dataclass(frozen=True, slots=True)
class ClassificationResult:
    """Veredicto derivado del texto que devolvió el modelo."""

    verdict: Verdict
    outcome: str

    @property
    def is_warning(self) -> bool:
        return self.verdict in (Verdict.SPAM, Verdict.SCAM)


def build_prompt(message_text: str) -> str:
    """Inserta el mensaje del usuario en la instrucción fija."""
    return PROMPT_TEMPLATE.format(message=message_text)


def build_request_body(message_text: str) -> dict[str, Any]:
    return {"contents": [{"parts": [{"text": build_prompt(message_text)}]}]}


def classify_outcome(outcome: str) -> ClassificationResult:
    """Mapea el texto del modelo a un veredicto.

    `SPAM` se revisa antes que `SCAM`, así que un texto con ambas palabras queda
    etiquetado como `SPAM`. La etiqueta es sólo informativa: ambas producen la
    misma alerta y la respuesta usa siempre el texto completo del modelo.
    """
    if "SPAM" in outcome:
        return ClassificationResult(Verdict.SPAM, outcome)
    if "SCAM" in outcome:
        return ClassificationResult(Verdict.SCAM, outcome)
    if "LEGITIMATE" in outcome:
        return ClassificationResult(Verdict.LEGITIMATE, outcome)
    return ClassificationResult(Verdict.UNKNOWN, outcome)


def extract_outcome(data: Any) -> str:
    """Lee `candidates[0].content.parts[0].text` y lo recorta."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ClassifierResponseError("Unexpected Gemini response shape") from exc
    if not isinstance(text, str):
        raise ClassifierResponseError("Gemini candidate text is not a string")
    return text.strip()


async def analyze_message(message_text: str, settings: Settings) -> str:
    """Envía el mensaje a Gemini y retorna el texto de clasificación recortado.

    Sin API key configurada retorna `NOT_CONFIGURED_MESSAGE` sin tocar la red.

    Raises:
        ClassifierUnavailableError: Error de red al llamar a Gemini.
        ClassifierResponseError: Respuesta con status de error o forma inesperada.
    """
    if not settings.gemini_api_key:
        logger.error("classifier.not_configured")
        return NOT_CONFIGURED_MESSAGE

    base_url = settings.gemini_base_url.rstrip("/")
    url = f"{base_url}/v1beta/models/{settings.gemini_model}:generateContent"

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            response = await client.post(
                url,
                params={"key": settings.gemini_api_key},
                json=build_request_body(message_text),
            )
    except httpx.RequestError as exc:
        logger.error(
            "classifier.request_failed",
            extra={"error_type": type(exc).__name__, "model": settings.gemini_model},
        )
        raise ClassifierUnavailableError("Could not reach analysis service.") from exc

    if response.status_code >= 400:
        logger.error(
            "classifier.upstream_error",
            extra={"status": response.status_code, "body": response.text[:500]},
        )
        raise ClassifierResponseError(f"Gemini returned status {response.status_code}")

    try:
        data = response.json()
    except ValueError as exc:
        logger.error("classifier.invalid_json", extra={"body": response.text[:500]})
        raise ClassifierResponseError("Gemini returned a non-JSON body") from exc

    try:
        outcome = extract_outcome(data)
    except ClassifierResponseError:
        logger.error("classifier.parse_failed", extra={"body": response.text[:500]})
        raise

    logger.debug("classifier.completed", extra={"outcome": outcome})
    return outcome


async def classify_message(message_text: str, settings: Settings) -> ClassificationResult:
    """Atajo que combina `analyze_message` y `classify_outcome`."""
    return classify_outcome(await analyze_message(message_text, settings))
