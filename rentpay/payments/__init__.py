"""
Module 'payments' (feature-first): point d'entrée public.
Réunit conversion des montants, règles d'autorisation, client Stripe, repository BD et services.
"""

from .amounts import Currency, to_minor_units
from .checkout import to_line_items, make_metadata, extract_payment_id, format_due_date
from .policies import (
    PaymentStatus,
    can_transition,
    is_owner,
    require_authenticated,
    require_owner,
    require_payable,
)
from .stripe_client import require_stripe, create_embedded_session, parse_event
from .repository import fetch_payment_for_checkout, fetch_payment_owner, mark_paid
from .service import create_rent_payment_session, mark_payment_as_paid, confirm_from_webhook

__all__ = [
    # amounts
    "Currency",
    "to_minor_units",
    # checkout
    "to_line_items",
    "make_metadata",
    "extract_payment_id",
    "format_due_date",
    # policies
    "PaymentStatus",
    "can_transition",
    "is_owner",
    "require_authenticated",
    "require_owner",
    "require_payable",
    # stripe
    "require_stripe",
    "create_embedded_session",
    "parse_event",
    # repository
    "fetch_payment_for_checkout",
    "fetch_payment_owner",
    "mark_paid",
    # services
    "create_rent_payment_session",
    "mark_payment_as_paid",
    "confirm_from_webhook",
]
