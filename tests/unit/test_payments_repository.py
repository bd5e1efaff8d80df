import httpx
import pytest
from unittest.mock import MagicMock
from postgrest.exceptions import APIError

import rentpay.payments.repository as repo
from rentpay.payments.errors import PersistenceError, UpstreamError

class _Resp:
    def __init__(self, data=None):
        self.data = data

def _select_chain(client):
    return client.table.return_value.select.return_value.eq.return_value.limit.return_value

def _update_chain(client):
    return client.table.return_value.update.return_value.eq.return_value.eq.return_value

@pytest.fixture
def user_client(monkeypatch):
    client = MagicMock()
    tokens = []
    def _get_user_supabase(token):
        tokens.append(token)
        return client
    monkeypatch.setattr("rentpay.infra.supabase_client.get_user_supabase", _get_user_supabase)
    client.tokens = tokens
    return client

def test_fetch_payment_for_checkout_uses_structured_filter(user_client):
    _select_chain(user_client).execute.return_value = _Resp([{"id": "pay-1", "status": "pending"}])

    row = repo.fetch_payment_for_checkout("pay-1", user_token="jwt")

    assert row == {"id": "pay-1", "status": "pending"}
    user_client.table.assert_called_once_with("rent_payments")
    user_client.table.return_value.select.assert_called_once_with(repo.CHECKOUT_SELECT)
    user_client.table.return_value.select.return_value.eq.assert_called_once_with("id", "pay-1")
    assert user_client.tokens == ["jwt"]

def test_checkout_select_joins_tenant_and_property():
    assert "renter_id" in repo.CHECKOUT_SELECT
    assert "properties" in repo.CHECKOUT_SELECT and "title, address" in repo.CHECKOUT_SELECT
    assert "renter_id" in repo.OWNER_SELECT and "properties" not in repo.OWNER_SELECT

def test_fetch_payment_missing_returns_none(user_client):
    _select_chain(user_client).execute.return_value = _Resp([])
    assert repo.fetch_payment_owner("pay-404") is None

def test_fetch_payment_empty_id_skips_query(user_client):
    assert repo.fetch_payment_owner("") is None
    user_client.table.assert_not_called()

def test_fetch_payment_invalid_uuid_is_not_found(user_client):
    _select_chain(user_client).execute.side_effect = APIError({"message": "invalid input syntax for type uuid", "code": "22P02"})
    assert repo.fetch_payment_owner("not-a-uuid") is None

def test_fetch_payment_api_error_is_upstream(user_client):
    _select_chain(user_client).execute.side_effect = APIError({"message": "boom", "code": "XX000"})
    with pytest.raises(UpstreamError) as exc:
        repo.fetch_payment_owner("pay-1")
    assert exc.value.status_code == 502

def test_fetch_payment_timeout_is_upstream(user_client):
    _select_chain(user_client).execute.side_effect = httpx.ConnectTimeout("timeout")
    with pytest.raises(UpstreamError):
        repo.fetch_payment_for_checkout("pay-1")

def test_fetch_payment_owner_with_service_role(monkeypatch):
    service = MagicMock()
    _select_chain(service).execute.return_value = _Resp([{"id": "pay-1"}])
    monkeypatch.setattr("rentpay.infra.supabase_client.get_service_supabase", lambda: service)
    monkeypatch.setattr("rentpay.infra.supabase_client.get_user_supabase", MagicMock(side_effect=AssertionError("user client")))
    assert repo.fetch_payment_owner("pay-1", use_service=True) == {"id": "pay-1"}

def test_mark_paid_updates_only_pending_row(user_client):
    _update_chain(user_client).execute.return_value = _Resp([{"id": "pay-1", "status": "paid"}])

    row = repo.mark_paid(payment_id="pay-1", stripe_payment_id="pi_1", paid_date="2026-01-05T10:00:00+00:00", user_token="jwt")

    assert row == {"id": "pay-1", "status": "paid"}
    user_client.table.return_value.update.assert_called_once_with({
        "status": "paid",
        "paid_date": "2026-01-05T10:00:00+00:00",
        "stripe_payment_id": "pi_1",
    })
    user_client.table.return_value.update.return_value.eq.assert_called_once_with("id", "pay-1")
    user_client.table.return_value.update.return_value.eq.return_value.eq.assert_called_once_with("status", "pending")

def test_mark_paid_no_matching_row_returns_none(user_client):
    _update_chain(user_client).execute.return_value = _Resp([])
    assert repo.mark_paid(payment_id="pay-1", stripe_payment_id="pi_1", paid_date="now") is None

def test_mark_paid_failure_raises_persistence_error(user_client):
    _update_chain(user_client).execute.side_effect = APIError({"message": "permission denied", "code": "42501"})
    with pytest.raises(PersistenceError) as exc:
        repo.mark_paid(payment_id="pay-1", stripe_payment_id="pi_1", paid_date="now")
    assert exc.value.status_code == 500
