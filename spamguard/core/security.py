"""Helpers de validación para el webhook de Meta."""

import hmac
from hashlib import sha256


class SignatureError(Exception):
    """La firma `X-Hub-Signature-256` falta o no coincide."""


def tokens_match(expected: str | None, received: str | None) -> bool:
    """Compara tokens en tiempo constante; un token no configurado nunca coincide."""
    if not expected or received is None:
        return False
    return hmac.compare_digest(expected.encode(), received.encode())


def verify_signature(
    secret: str, payload: bytes, signature: str | None, *, header_prefix: str = "sha256="
) -> None:
    """Verifica firmas HMAC-SHA256 de Meta.

    Args:
        secret: App secret de Meta.
        payload: Cuerpo bruto recibido.
        signature: Valor del header `X-Hub-Signature-256`.
        header_prefix: Prefijo esperado (ej. "sha256=").

    Raises:
        SignatureError: Si la firma falta o no coincide.
    """
    if not signature:
        raise SignatureError("Missing signature header")
    expected_token = f"{header_prefix}{build_signature(secret, payload)}"
    if not hmac.compare_digest(expected_token.encode(), signature.encode()):
        raise SignatureError("Invalid signature received")


def build_signature(secret: str, payload: bytes) -> str:
    digest = hmac.new(secret.encode(), payload, sha256)
    return digest.hexdigest()


def mask_secret(value: str | None) -> str | None:
    """Enmascara secretos e identificadores para logging seguro."""
    if not value:
        return value
    if len(value) <= 4:
        return "***"
    return f"{value[:2]}***{value[-2:]}"
