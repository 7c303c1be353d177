"""Dependencias reutilizables para rutas de WhatsApp."""

from fastapi import Request

from spamguard.core.config import Settings


def get_app_settings(request: Request) -> Settings:
    """Retorna la configuración inyectada en `create_app`."""
    return request.app.state.settings
