"""Configuración central basada en variables de entorno."""

from functools import lru_cache

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Valores globales leídos desde `.env` o el entorno.

    Todos los campos son opcionales: si falta una credencial, la función que
    depende de ella se degrada pero el servidor sigue arrancando.
    """

    environment: str = "development"
    log_level: str | None = Field(
        default=None,
        description="Nivel de logging global (ej. debug, info, warning). Cuando no se define, usa un valor por ambiente.",
    )
    log_file_path: str | None = Field(
        default=None,
        description="Archivo principal de logs; sin valor sólo se escribe a stdout.",
    )
    request_log_skip_prefixes: tuple[str, ...] = Field(
        default=("/health", "/favicon", "/docs", "/openapi"),
        description="Prefijos de ruta para los que no se registrarán eventos de request.started/completed.",
    )
    whatsapp_api_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SPAMGUARD_WHATSAPP_API_TOKEN", "WHATSAPP_API_TOKEN"),
    )
    verify_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SPAMGUARD_VERIFY_TOKEN", "VERIFY_TOKEN"),
    )
    phone_number_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SPAMGUARD_PHONE_NUMBER_ID", "PHONE_NUMBER_ID"),
    )
    gemini_api_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SPAMGUARD_GEMINI_API_KEY", "GEMINI_API_KEY"),
    )
    # Sólo se valida X-Hub-Signature-256 cuando existe el secreto de la app.
    app_secret: str | None = Field(
        default=None,
        validation_alias=AliasChoices("SPAMGUARD_APP_SECRET", "WHATSAPP_APP_SECRET"),
    )
    host: str = "0.0.0.0"
    port: int = Field(default=3000, validation_alias=AliasChoices("SPAMGUARD_PORT", "PORT"))
    graph_api_base_url: str = "https://graph.facebook.com"
    graph_api_version: str = "v20.0"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    gemini_model: str = "gemini-2.5-flash-preview-05-20"
    link_preview: bool = Field(
        default=True,
        description="Valor de `preview_url` en los mensajes salientes.",
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        description="Timeout para llamadas salientes a Gemini y a la Cloud API.",
    )
    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="SPAMGUARD_",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        env_ignore_empty=True,
    )

    @property
    def classifier_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def sender_configured(self) -> bool:
        return bool(self.whatsapp_api_token and self.phone_number_id)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Carga la configuración una sola vez por proceso."""
    return Settings()
