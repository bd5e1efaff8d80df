"""
Cas d'usage 'payments': orchestre repository, policies, checkout et stripe.

Ordre garanti: lecture + vérifications (auth, propriété, statut) avant tout appel externe;
un seul aller-retour vers Stripe ou Supabase ensuite, sans retry.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

from . import checkout
from . import policies
from . import repository
from . import stripe_client
from .errors import AlreadyPaid, InvalidPaymentReference, InvalidStatus, NotFound, PersistenceError, UpstreamError
from .policies import PaymentStatus

logger = logging.getLogger(__name__)

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()

def create_rent_payment_session(payment_id: str, user: Optional[Dict[str, Any]]) -> str:
    """
    Crée une session Checkout Stripe (embedded) pour un loyer du locataire connecté.
    - Unauthenticated si pas d'utilisateur, NotFound si paiement absent
    - Forbidden si l'appelant n'est pas le locataire, AlreadyPaid si déjà réglé
    Retour: client_secret de la session (aucune écriture locale).
    """
    user_id = policies.require_authenticated(user)
    payment = repository.fetch_payment_for_checkout(payment_id, user_token=(user or {}).get("token"))
    if not payment:
        raise NotFound("Paiement introuvable")
    policies.require_owner(user_id, payment, action="consulter")
    policies.require_payable(payment)

    line_items = checkout.to_line_items(payment)
    session = stripe_client.create_embedded_session(
        line_items=line_items,
        mode="payment",
        metadata=checkout.make_metadata(payment_id),
    )
    client_secret = session.get("client_secret")
    if not client_secret:
        raise UpstreamError("Session Stripe sans client_secret")
    logger.info("payments.checkout created payment_id=%s session_id=%s user_id=%s", payment_id, session.get("id"), user_id)
    return client_secret

def _transition_to_paid(
    payment: Dict[str, Any],
    stripe_payment_id: str,
    user_token: Optional[str] = None,
    use_service: bool = False,
) -> Dict[str, Any]:
    """
    pending -> paid, idempotent pour une même référence Stripe.
    - Déjà payé avec la même référence: succès sans écriture (already_paid=True)
    - Déjà payé avec une autre référence: AlreadyPaid
    """
    payment_id = str(payment.get("id"))
    if policies.is_paid(payment):
        if payment.get("stripe_payment_id") == stripe_payment_id:
            return {"success": True, "already_paid": True}
        raise AlreadyPaid("Ce paiement a déjà été réglé avec une autre référence")
    if not policies.can_transition(payment.get("status"), PaymentStatus.PAID):
        raise InvalidStatus(f"Statut '{payment.get('status')}' incompatible avec un règlement")

    row = repository.mark_paid(
        payment_id=payment_id,
        stripe_payment_id=stripe_payment_id,
        paid_date=_now_iso(),
        user_token=user_token,
        use_service=use_service,
    )
    if row:
        logger.info("payments.paid payment_id=%s stripe_payment_id=%s", payment_id, stripe_payment_id)
        return {"success": True, "already_paid": False}

    # Aucune ligne 'pending' mise à jour: relire pour savoir qui a gagné
    current = repository.fetch_payment_owner(payment_id, user_token=user_token, use_service=use_service)
    if not current:
        raise NotFound("Paiement introuvable")
    if policies.is_paid(current):
        if current.get("stripe_payment_id") == stripe_payment_id:
            return {"success": True, "already_paid": True}
        raise AlreadyPaid("Ce paiement a déjà été réglé avec une autre référence")
    raise PersistenceError("Aucune ligne mise à jour pour ce paiement")

def mark_payment_as_paid(payment_id: str, stripe_payment_id: str, user: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Marque un loyer comme payé au nom du locataire connecté.
    - Unauthenticated / NotFound / Forbidden comme pour la création de session
    - Enregistre status='paid', paid_date (UTC) et stripe_payment_id
    - PersistenceError propagée telle quelle si l'écriture échoue
    """
    user_id = policies.require_authenticated(user)
    user_token = (user or {}).get("token")
    payment = repository.fetch_payment_owner(payment_id, user_token=user_token)
    if not payment:
        raise NotFound("Paiement introuvable")
    policies.require_owner(user_id, payment, action="modifier")

    reference = (stripe_payment_id or "").strip()
    if not reference:
        raise InvalidPaymentReference()
    return _transition_to_paid(payment, reference, user_token=user_token)

def confirm_from_webhook(event: Dict[str, Any]) -> Dict[str, Any]:
    """
    Traite checkout.session.completed: marque le paiement lié (metadata.payment_id) comme payé.
    - Client service-role (Stripe est l'appelant, pas le locataire)
    - Référence: payment_intent de la session, à défaut l'id de session
    - Renvoie {"status": "ignored"} si l'événement ne concerne pas un loyer payé,
      ou vise un paiement inconnu ou non réglable (Stripe ne doit pas relivrer)
    """
    if (event or {}).get("type") != "checkout.session.completed":
        return {"status": "ignored"}
    session = ((event or {}).get("data") or {}).get("object") or {}
    payment_id = checkout.extract_payment_id(event)
    if not payment_id or session.get("payment_status") != "paid":
        return {"status": "ignored"}

    reference = session.get("payment_intent") or session.get("id") or ""
    if isinstance(reference, dict):
        reference = reference.get("id") or ""
    if not reference:
        logger.warning("payments.webhook.ignored payment_id=%s reason=no_reference", payment_id)
        return {"status": "ignored"}
    payment = repository.fetch_payment_owner(payment_id, use_service=True)
    if not payment:
        logger.warning("payments.webhook.ignored payment_id=%s reason=unknown_payment", payment_id)
        return {"status": "ignored"}
    try:
        result = _transition_to_paid(payment, str(reference), use_service=True)
    except (AlreadyPaid, InvalidStatus, NotFound) as exc:
        logger.warning("payments.webhook.ignored payment_id=%s reason=%s", payment_id, exc.detail)
        return {"status": "ignored"}
    return {"status": "ok", **result}
