"""
Prédicats d'autorisation et machine d'états des paiements de loyer.
Indépendants du stockage: opèrent sur les dicts renvoyés par le repository.
"""
from enum import Enum
from typing import Any, Dict, Optional

from .errors import AlreadyPaid, Forbidden, Unauthenticated


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"

    @classmethod
    def parse(cls, value: Any) -> Optional["PaymentStatus"]:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            return None


# Seule transition définie: pending -> paid. 'paid' est terminal.
_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID},
    PaymentStatus.PAID: set(),
}


def can_transition(current: Any, target: Any) -> bool:
    src = PaymentStatus.parse(current)
    dst = PaymentStatus.parse(target)
    if src is None or dst is None:
        return False
    return dst in _TRANSITIONS[src]


def renter_id_of(payment: Dict[str, Any]) -> Optional[str]:
    tenant = (payment or {}).get("tenants") or {}
    # PostgREST renvoie un objet pour une FK many-to-one, une liste sinon
    if isinstance(tenant, list):
        tenant = tenant[0] if tenant else {}
    renter_id = tenant.get("renter_id")
    return str(renter_id) if renter_id else None


def is_owner(user_id: Optional[str], payment: Dict[str, Any]) -> bool:
    renter_id = renter_id_of(payment)
    return bool(user_id) and renter_id is not None and renter_id == str(user_id)


def is_paid(payment: Dict[str, Any]) -> bool:
    return PaymentStatus.parse((payment or {}).get("status")) is PaymentStatus.PAID


def require_authenticated(user: Optional[Dict[str, Any]]) -> str:
    """Retourne l'id de l'appelant ou lève Unauthenticated."""
    user_id = (user or {}).get("id")
    if not user_id:
        raise Unauthenticated("Non authentifié: utilisateur non connecté")
    return str(user_id)


def require_owner(user_id: str, payment: Dict[str, Any], action: str = "consulter") -> None:
    if not is_owner(user_id, payment):
        raise Forbidden(f"Accès refusé: vous ne pouvez pas {action} ce paiement")


def require_payable(payment: Dict[str, Any]) -> None:
    if is_paid(payment):
        raise AlreadyPaid("Ce paiement a déjà été réglé")
