"""
Conversion des montants de loyer vers l'unité minimale attendue par Stripe.

Logique pure (pas de Stripe, pas de DB), seule sortie de bord: un événement
de log structuré quand un montant UGX doit être arrondi.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from enum import Enum
from typing import Any, Union
import logging

from .errors import InvalidAmount, UnsupportedCurrency

logger = logging.getLogger(__name__)

ROUNDING_EVENT = "payments.amount.rounded"

Amount = Union[int, float, str, Decimal]


class Currency(str, Enum):
    """
    Devises acceptées par le paiement des loyers.
    Ajouter une devise = ajouter un membre ici et sa règle dans _minor_units_for.
    """
    USD = "USD"
    UGX = "UGX"

    @classmethod
    def parse(cls, code: Any) -> "Currency":
        value = str(code or "").strip().upper()
        try:
            return cls(value)
        except ValueError:
            raise UnsupportedCurrency(f"Devise non supportée: {code}")

    @property
    def whole_units_only(self) -> bool:
        # UGX n'a pas de subdivision, mais Stripe exige une représentation à deux décimales
        return self is Currency.UGX


def _to_decimal(amount: Amount) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmount("Le montant du paiement doit être un nombre valide")
    try:
        value = amount if isinstance(amount, Decimal) else Decimal(str(amount).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount("Le montant du paiement doit être un nombre valide")
    if not value.is_finite():
        raise InvalidAmount("Le montant du paiement doit être un nombre valide")
    if value <= 0:
        raise InvalidAmount("Le montant du paiement doit être supérieur à zéro")
    return value


def _round_half_up(value: Decimal) -> int:
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _minor_units_for(value: Decimal, currency: Currency) -> int:
    cents = _round_half_up(value * 100)
    rounded = _round_half_up(Decimal(cents) / 100) * 100 if currency.whole_units_only else cents
    if rounded != cents:
        logger.warning(
            "%s amount=%s currency=%s raw=%s rounded=%s",
            ROUNDING_EVENT, value, currency.value, cents, rounded,
            extra={
                "event": ROUNDING_EVENT,
                "amount": str(value),
                "currency": currency.value,
                "raw": cents,
                "rounded": rounded,
                "difference": rounded - cents,
            },
        )
    return rounded


def to_minor_units(amount: Amount, currency: Any) -> int:
    """
    Convertit un montant décimal + code devise en entier (unité minimale Stripe).
    - USD: round(amount × 100)
    - UGX: round(amount × 100) ramené au multiple de 100 le plus proche
      (Stripe arrondirait silencieusement sinon); l'écart est loggé, jamais levé.
    - Arrondi « half-up » sur la valeur décimale exacte (49.999 USD -> 5000).
    Erreurs: InvalidAmount (<= 0, NaN, infini, non numérique), UnsupportedCurrency.
    """
    value = _to_decimal(amount)
    return _minor_units_for(value, Currency.parse(currency))
