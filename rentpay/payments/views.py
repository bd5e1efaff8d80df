import logging
from typing import Any, Dict

from fastapi import APIRouter, Request, Depends
from pydantic import BaseModel

from rentpay.utils.security import require_user
from rentpay.utils.rate_limit import optional_rate_limit
from rentpay.payments import stripe_client
from rentpay.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/payments", tags=["Payments API"])


class MarkPaidBody(BaseModel):
    stripe_payment_id: str


# module rentpay.payments.views
@router.post("/rent/{payment_id}/checkout", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
def create_rent_checkout(payment_id: str, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """
    Crée une session Checkout Stripe (embedded) pour un loyer du locataire connecté.
    - Sécurité: require_user + rate limit (10 req / 60s)
    - Réponse: {"client_secret": "..."} à passer à Stripe.js (initEmbeddedCheckout)
    - Erreurs: 401, 403, 404, 409 (déjà payé), 400 (montant/devise), 502 (Stripe)
    """
    client_secret = payments_service.create_rent_payment_session(payment_id, user)
    return {"client_secret": client_secret}

@router.post("/rent/{payment_id}/paid")
def mark_rent_paid(payment_id: str, body: MarkPaidBody, user: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
    """
    Marque le loyer comme payé après confirmation côté client.
    - Entrée JSON: {"stripe_payment_id": "pi_..."}
    - Réponse: {"success": true, "already_paid": bool}
    - Erreurs: 401, 403, 404, 409, 500 (écriture impossible)
    """
    return payments_service.mark_payment_as_paid(payment_id, body.stripe_payment_id, user)

@router.post("/webhook", include_in_schema=False)
async def webhook_stripe(request: Request) -> Dict[str, Any]:
    """
    Webhook Stripe: consomme checkout.session.completed pour marquer le loyer payé.
    - Signature: valide via stripe_client.parse_event (Stripe-Signature + STRIPE_WEBHOOK_SECRET)
    - Réponses: {"status": "ok", ...} ou {"status": "ignored"}
    """
    event = await stripe_client.parse_event(request)
    result = payments_service.confirm_from_webhook(event)
    logger.info("payments.webhook type=%s status=%s", (event or {}).get("type"), result.get("status"))
    return result
