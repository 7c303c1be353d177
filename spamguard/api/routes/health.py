"""Endpoint de salud mínimo para validaciones rápidas."""
from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_class=PlainTextResponse, summary="Estado del servicio")
def healthcheck() -> str:
    """Retorna `OK` sin inspeccionar el request."""
    return "OK"
