from __future__ import annotations

from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.requests import Request

from app.core.config import Settings
from app.core.context import AppContext
from app.main import create_app
from app.services import token_service

PASSCODE = "system-passcode-for-tests"
BEARER_TOKEN = "bearer-token-for-tests"
METRICS_PATH = "/api/monitoring/metrics"


def make_settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "app_env": "test",
        "log_level": "info",
        "log_json": False,
        "port": 8000,
        "safe_mode": True,
        "system_passcode": PASSCODE,
        "bearer_token": BEARER_TOKEN,
    }
    values.update(overrides)
    return Settings(**values)


def make_request(
    headers: dict[str, str] | None = None,
    path: str = METRICS_PATH,
) -> Request:
    """Build a bare Starlette request for validator-level tests."""
    raw = [
        (k.lower().encode("latin-1"), v.encode("latin-1"))
        for k, v in (headers or {}).items()
    ]
    return Request(
        {
            "type": "http",
            "method": "GET",
            "path": path,
            "raw_path": path.encode(),
            "query_string": b"",
            "headers": raw,
        }
    )


def mint_session(username: str = "test-user", roles: list[str] | None = None) -> str:
    return token_service.create_session_token(sub=username, roles=roles)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def application(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture
def ctx(application: FastAPI) -> AppContext:
    return application.state.context


@pytest.fixture
def client(application: FastAPI) -> TestClient:
    return TestClient(application)


@pytest.fixture
def passcode_headers() -> dict[str, str]:
    return {"X-System-Passcode": PASSCODE}


@pytest.fixture
def bearer_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {BEARER_TOKEN}"}
