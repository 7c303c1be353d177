"""Fixtures compartidas para las pruebas."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from spamguard.core.config import Settings
from spamguard.main import create_app

GEMINI_HOST = "generativelanguage.googleapis.com"
GRAPH_HOST = "graph.facebook.com"


def build_text_payload(body: str, sender: str = "15551234567") -> dict[str, Any]:
    """Webhook mínimo de Meta con un mensaje de texto."""
    return {
        "object": "whatsapp_business_account",
        "entry": [
            {
                "id": "WABA_ID",
                "changes": [
                    {
                        "field": "messages",
                        "value": {
                            "messaging_product": "whatsapp",
                            "metadata": {"phone_number_id": "12345"},
                            "messages": [
                                {
                                    "from": sender,
                                    "id": "wamid.ABC",
                                    "type": "text",
                                    "text": {"body": body},
                                }
                            ],
                        },
                    }
                ],
            }
        ],
    }


@dataclass
class FakeUpstream:
    """Simula Gemini y la Cloud API detrás de `httpx.MockTransport`."""

    gemini_text: str = "LEGITIMATE"
    gemini_status: int = 200
    gemini_unreachable: bool = False
    graph_status: int = 200
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == GEMINI_HOST:
            if self.gemini_unreachable:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(
                self.gemini_status,
                json={"candidates": [{"content": {"parts": [{"text": self.gemini_text}]}}]},
            )
        if request.url.host == GRAPH_HOST:
            return httpx.Response(self.graph_status, json={"messages": [{"id": "wamid.OUT"}]})
        return httpx.Response(404)

    @property
    def gemini_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == GEMINI_HOST]

    @property
    def graph_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == GRAPH_HOST]

    @property
    def sent_bodies(self) -> list[str]:
        return [json.loads(r.content)["text"]["body"] for r in self.graph_requests]


@pytest.fixture(name="settings")
def fixture_settings() -> Settings:
    return Settings(
        _env_file=None,
        verify_token="verify-me",
        whatsapp_api_token="wa-token",
        phone_number_id="12345",
        gemini_api_key="gem-key",
        app_secret=None,
        log_file_path=None,
    )


@pytest.fixture(name="text_payload")
def fixture_text_payload() -> Callable[..., dict[str, Any]]:
    return build_text_payload


@pytest.fixture(name="upstream")
def fixture_upstream(monkeypatch: pytest.MonkeyPatch) -> FakeUpstream:
    """Redirige todo `httpx.AsyncClient` sin transporte explícito a `FakeUpstream`."""
    fake = FakeUpstream()
    real_client = httpx.AsyncClient

    def factory(*args: Any, **kwargs: Any) -> httpx.AsyncClient:
        kwargs.setdefault("transport", httpx.MockTransport(fake.handler))
        return real_client(*args, **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)
    return fake


@pytest.fixture(name="async_client")
async def fixture_async_client(settings: Settings) -> AsyncClient:
    """Retorna un cliente asíncrono contra la app utilizando ASGITransport."""
    app = create_app(settings)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
