"""
Accès aux données pour la feature 'payments' (table rent_payments).

Tous les filtres passent par les méthodes du query builder Supabase
(.eq, .select, .update): aucune requête SQL n'est construite par concaténation.
"""
from typing import Any, Dict, Optional
import logging

import httpx
from postgrest.exceptions import APIError

import rentpay.infra.supabase_client as supabase_client
from .errors import PersistenceError, UpstreamError

logger = logging.getLogger(__name__)

TABLE = "rent_payments"

CHECKOUT_SELECT = (
    "*, "
    "tenants!rent_payments_tenant_id_fkey("
    "renter_id, "
    "properties!tenants_property_id_fkey(title, address)"
    ")"
)
OWNER_SELECT = "*, tenants!rent_payments_tenant_id_fkey(renter_id)"

# Codes PostgREST/Postgres signifiant « aucune ligne » plutôt qu'une panne
_NOT_FOUND_CODES = {"PGRST116", "22P02"}

# module rentpay.payments.repository
def _client(user_token: Optional[str], use_service: bool):
    if use_service:
        return supabase_client.get_service_supabase()
    return supabase_client.get_user_supabase(user_token)

def _fetch_payment(payment_id: str, columns: str, user_token: Optional[str], use_service: bool) -> Optional[Dict[str, Any]]:
    if not payment_id:
        return None
    try:
        res = (
            _client(user_token, use_service)
            .table(TABLE)
            .select(columns)
            .eq("id", str(payment_id))
            .limit(1)
            .execute()
        )
    except APIError as e:
        if getattr(e, "code", None) in _NOT_FOUND_CODES:
            return None
        logger.exception("payments.repository lecture échouée payment_id=%s", payment_id)
        raise UpstreamError("Lecture du paiement impossible") from e
    except httpx.HTTPError as e:
        logger.exception("payments.repository Supabase injoignable payment_id=%s", payment_id)
        raise UpstreamError("Base de données injoignable") from e
    rows = res.data or []
    if isinstance(rows, dict):
        return rows
    return rows[0] if rows else None

def fetch_payment_for_checkout(payment_id: str, user_token: Optional[str] = None) -> Optional[Dict[str, Any]]:
    """
    Paiement + locataire (renter_id) + bien (title, address), ou None si absent.
    """
    return _fetch_payment(payment_id, CHECKOUT_SELECT, user_token, use_service=False)

def fetch_payment_owner(payment_id: str, user_token: Optional[str] = None, use_service: bool = False) -> Optional[Dict[str, Any]]:
    """
    Paiement + renter_id seulement (suffisant pour vérifier la propriété).
    """
    return _fetch_payment(payment_id, OWNER_SELECT, user_token, use_service=use_service)

def mark_paid(
    *,
    payment_id: str,
    stripe_payment_id: str,
    paid_date: str,
    user_token: Optional[str] = None,
    use_service: bool = False,
) -> Optional[Dict[str, Any]]:
    """
    Transition pending -> paid, conditionnée côté base à status='pending'.
    - Retourne la ligne mise à jour, ou None si aucune ligne 'pending' ne correspondait
      (déjà payée entre-temps ou supprimée).
    - Lève PersistenceError si l'écriture échoue; pas de retry.
    """
    try:
        res = (
            _client(user_token, use_service)
            .table(TABLE)
            .update({
                "status": "paid",
                "paid_date": paid_date,
                "stripe_payment_id": stripe_payment_id,
            })
            .eq("id", str(payment_id))
            .eq("status", "pending")
            .execute()
        )
    except (APIError, httpx.HTTPError) as e:
        logger.exception("payments.repository.mark_paid échec payment_id=%s", payment_id)
        raise PersistenceError(f"Impossible d'enregistrer le paiement: {e}") from e
    rows = res.data or []
    if isinstance(rows, dict):
        return rows
    return rows[0] if rows else None
