import os

os.environ.setdefault("DISABLE_FASTAPI_LIMITER_INIT_FOR_TESTS", "1")

import pytest
from typing import Generator, Dict, Any
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from rentpay.asgi import app as fastapi_app
from rentpay.utils.security import get_current_user

RENTER = {
    "id": "renter-1",
    "email": "renter@example.com",
    "metadata": {"full_name": "Test Renter"},
    "token": "fake-token",
}

# Marquage automatique selon le dossier
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)

@pytest.fixture(scope="session")
def app():
    return fastapi_app

@pytest.fixture()
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c

@pytest.fixture()
def renter() -> Dict[str, Any]:
    return dict(RENTER)

# Simuler un locataire authentifié pour les endpoints protégés
@pytest.fixture(autouse=True)
def _override_current_user(app):
    app.dependency_overrides[get_current_user] = lambda: dict(RENTER)
    try:
        yield
    finally:
        app.dependency_overrides.pop(get_current_user, None)

@pytest.fixture()
def anonymous(app):
    app.dependency_overrides[get_current_user] = lambda: None
    yield
    app.dependency_overrides[get_current_user] = lambda: dict(RENTER)

# Aucun test ne doit joindre Supabase
@pytest.fixture(scope="function", autouse=True)
def mock_db_dependency(monkeypatch):
    monkeypatch.setattr("rentpay.infra.supabase_client.get_supabase", lambda: MagicMock())
    monkeypatch.setattr("rentpay.infra.supabase_client.get_service_supabase", lambda: MagicMock())
    monkeypatch.setattr("rentpay.infra.supabase_client.get_user_supabase", lambda token: MagicMock())

def make_payment(**overrides) -> Dict[str, Any]:
    payment = {
        "id": "pay-1",
        "amount": 1200.5,
        "currency": "USD",
        "status": "pending",
        "due_date": "2026-01-05",
        "paid_date": None,
        "stripe_payment_id": None,
        "tenant_id": "tenant-1",
        "tenants": {
            "renter_id": "renter-1",
            "properties": {"title": "Sunny Loft", "address": "12 Kampala Road"},
        },
    }
    payment.update(overrides)
    return payment

@pytest.fixture()
def payment_factory():
    return make_payment
