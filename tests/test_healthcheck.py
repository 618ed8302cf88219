"""Tests for the healthcheck script."""
import importlib.util
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

from object_gateway.common.config import settings

SCRIPT = Path(__file__).resolve().parent.parent / "scripts" / "healthcheck.py"


@pytest.fixture
def healthcheck():
    spec = importlib.util.spec_from_file_location("healthcheck", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_healthy(healthcheck, monkeypatch):
    get = MagicMock(return_value=MagicMock(status_code=200))
    monkeypatch.setattr(requests, "get", get)

    assert healthcheck.check_service("gateway", 3000) == 0
    assert get.call_args.args[0] == "http://localhost:3000/health"


def test_unhealthy(healthcheck, monkeypatch):
    monkeypatch.setattr(requests, "get", MagicMock(return_value=MagicMock(status_code=503)))
    assert healthcheck.check_service("gateway", 3000) == 1


def test_unreachable(healthcheck, monkeypatch):
    monkeypatch.setattr(
        requests, "get", MagicMock(side_effect=requests.ConnectionError("refused"))
    )
    assert healthcheck.check_service("gateway", 3000) == 1


def test_default_port_follows_settings(healthcheck, monkeypatch):
    get = MagicMock(return_value=MagicMock(status_code=200))
    monkeypatch.setattr(requests, "get", get)

    assert healthcheck.check_service("gateway") == 0
    assert get.call_args.args[0] == f"http://localhost:{settings.GATEWAY_PORT}/health"
