"""
Adaptateur Stripe: centralise les appels et la configuration Stripe.
"""
import logging
from typing import Any, Dict, List

import stripe
from fastapi import HTTPException, Request

from rentpay.config import STRIPE_SECRET_KEY, STRIPE_WEBHOOK_SECRET
from .errors import UpstreamError

logger = logging.getLogger(__name__)

# module rentpay.payments.stripe_client
def _field(obj: Any, key: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(key)
    return getattr(obj, key, None)

def require_stripe():
    """
    Prépare et retourne le module stripe prêt à l’emploi.
    - Configure stripe.api_key via STRIPE_SECRET_KEY.
    - Désactive les retries réseau du SDK: les échecs remontent immédiatement.
    """
    if not STRIPE_SECRET_KEY:
        raise UpstreamError("STRIPE_SECRET_KEY manquant")
    stripe.api_key = STRIPE_SECRET_KEY
    stripe.max_network_retries = 0
    return stripe

def create_embedded_session(
    *,
    line_items: List[Dict[str, Any]],
    mode: str,
    metadata: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Crée une session Checkout Stripe en mode intégré (embedded).
    - Pas de redirection à la fin: le front affiche la confirmation lui-même.
    Retour: dict session (ex: {"id": "cs_test_...", "client_secret": "cs_test_..._secret_..."})
    """
    require_stripe()
    try:
        session = stripe.checkout.Session.create(
            ui_mode="embedded",
            redirect_on_completion="never",
            line_items=line_items,
            mode=mode,
            metadata=metadata,
        )
    except stripe.StripeError as e:
        logger.exception("payments.stripe création de session échouée metadata=%s", metadata)
        raise UpstreamError(f"Stripe: {getattr(e, 'user_message', None) or 'création de session impossible'}") from e
    return {"id": _field(session, "id"), "client_secret": _field(session, "client_secret")}

async def parse_event(request: Request) -> Dict[str, Any]:
    """
    Parse et valide un événement Stripe signé (webhook).
    - Lit le body brut + en-tête Stripe-Signature
    - Valide la signature via Webhook.construct_event (STRIPE_WEBHOOK_SECRET)
    Erreurs: 400 si la signature ou le payload est invalide.
    """
    if not STRIPE_WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="STRIPE_WEBHOOK_SECRET manquant")
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature") or ""
    try:
        event = stripe.Webhook.construct_event(payload, sig_header, STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError) as e:
        raise HTTPException(status_code=400, detail=f"Webhook invalide: {e}") from e
    return event.to_dict() if hasattr(event, "to_dict") else dict(event)
