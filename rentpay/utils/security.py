from fastapi import Request, Depends
from typing import Optional, Dict, Any
import logging

import httpx
from supabase import AuthError, AuthRetryableError

from rentpay.payments.errors import Unauthenticated, UpstreamError

logger = logging.getLogger(__name__)

COOKIE_NAME = "sb_access"

def _token_from_request(request: Request) -> Optional[str]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)
    return token or None

def get_current_user(request: Request) -> Optional[Dict[str, Any]]:
    """
    Utilisateur courant ({id, email, metadata, token}) ou None si non connecté.
    Un token expiré ou invalide est traité comme une absence de session;
    Supabase Auth injoignable -> UpstreamError (502).
    """
    token = _token_from_request(request)
    if not token:
        return None
    try:
        # Délégué au service Auth
        from rentpay.auth.service import get_user_from_token as _svc_get_user_from_token
        user = _svc_get_user_from_token(token)
    except (AuthRetryableError, httpx.HTTPError):
        logger.exception("auth.get_current_user Supabase Auth injoignable")
        raise UpstreamError("Service d'authentification indisponible")
    except AuthError:
        logger.info("auth.get_current_user token rejeté par Supabase Auth")
        return None
    return user if user.get("id") else None

def require_user(user: Optional[Dict[str, Any]] = Depends(get_current_user)) -> Dict[str, Any]:
    if not user:
        raise Unauthenticated("Session expirée, veuillez vous connecter")
    return user
