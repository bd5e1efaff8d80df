"""
Construction des line_items Stripe pour un loyer (logique pure, pas de Stripe, pas de DB).
"""
from datetime import date, datetime
from typing import Any, Dict, List

from .amounts import Currency, to_minor_units

# module rentpay.payments.checkout
def property_of(payment: Dict[str, Any]) -> Dict[str, Any]:
    tenant = (payment or {}).get("tenants") or {}
    if isinstance(tenant, list):
        tenant = tenant[0] if tenant else {}
    prop = tenant.get("properties") or {}
    if isinstance(prop, list):
        prop = prop[0] if prop else {}
    return prop

def format_due_date(value: Any) -> str:
    """
    Date d'échéance au format M/D/YYYY (ex: "2026-01-05" -> "1/5/2026").
    Valeur illisible: renvoyée telle quelle.
    """
    if isinstance(value, datetime):
        d = value.date()
    elif isinstance(value, date):
        d = value
    else:
        raw = str(value or "").strip()
        try:
            d = date.fromisoformat(raw[:10])
        except ValueError:
            return raw
    return f"{d.month}/{d.day}/{d.year}"

def to_line_items(payment: Dict[str, Any]) -> List[Dict[str, Any]]:
    """
    Un seul line_item « Rent Payment - <titre> » au montant du loyer.
    - unit_amount: montant converti par to_minor_units (lève InvalidAmount/UnsupportedCurrency)
    - description: "<adresse> - Due <échéance>"
    """
    unit_amount = to_minor_units(payment.get("amount"), payment.get("currency"))
    currency = Currency.parse(payment.get("currency"))
    prop = property_of(payment)
    title = prop.get("title") or ""
    address = prop.get("address") or ""
    return [
        {
            "price_data": {
                "currency": currency.value.lower(),
                "product_data": {
                    "name": f"Rent Payment - {title}",
                    "description": f"{address} - Due {format_due_date(payment.get('due_date'))}",
                },
                "unit_amount": unit_amount,
            },
            "quantity": 1,
        }
    ]

def make_metadata(payment_id: str) -> Dict[str, str]:
    """Métadonnées Stripe: relient la session au paiement (utilisé par le webhook)."""
    return {"payment_id": str(payment_id)}

def extract_payment_id(event: Dict[str, Any]) -> str | None:
    """
    Extrait metadata.payment_id depuis un event Stripe (webhook).
    """
    data_obj = (event or {}).get("data", {}).get("object", {}) if isinstance(event, dict) else {}
    meta = data_obj.get("metadata") or {}
    return meta.get("payment_id") or None
