"""
Erreurs métier de la feature 'payments'.

Chaque erreur est une HTTPException: les services les lèvent directement et
le handler global de l'app les rend en JSON {"detail": ...}.
Aucune n'est rejouée (pas de retry local).
"""
from typing import Optional
from fastapi import HTTPException


class PaymentError(HTTPException):
    status_code = 400
    default_detail = "Erreur de paiement"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=type(self).status_code, detail=detail or self.default_detail)


class Unauthenticated(PaymentError):
    status_code = 401
    default_detail = "Non authentifié"


class Forbidden(PaymentError):
    status_code = 403
    default_detail = "Vous n'avez pas accès à ce paiement"


class NotFound(PaymentError):
    status_code = 404
    default_detail = "Paiement introuvable"


class AlreadyPaid(PaymentError):
    status_code = 409
    default_detail = "Ce paiement a déjà été réglé"


class InvalidAmount(PaymentError):
    status_code = 400
    default_detail = "Le montant du paiement doit être un nombre strictement positif"


class UnsupportedCurrency(PaymentError):
    status_code = 400
    default_detail = "Devise non supportée"


class InvalidPaymentReference(PaymentError):
    status_code = 400
    default_detail = "Référence de paiement Stripe manquante"


class UpstreamError(PaymentError):
    status_code = 502
    default_detail = "Service externe indisponible"


class PersistenceError(PaymentError):
    status_code = 500
    default_detail = "Impossible d'enregistrer le paiement"


class InvalidStatus(PaymentError):
    status_code = 409
    default_detail = "Statut de paiement incompatible avec cette opération"
