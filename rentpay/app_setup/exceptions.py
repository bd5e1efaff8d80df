"""
Gestionnaires d’exceptions.
- Les erreurs métier (PaymentError) sont des HTTPException: même rendu JSON que FastAPI.
- Les erreurs serveur (5xx) sont loggées avec le chemin de la requête.
"""
import logging
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre le handler HTTPException.
    - Body JSON {"detail": ...} standard pour les clients API.
    - Conserve les en-têtes éventuels (ex: WWW-Authenticate).
    """
    @app.exception_handler(HTTPException)
    async def json_http_errors(request: Request, exc: HTTPException):
        if exc.status_code >= 500:
            logger.error("HTTP %s sur %s: %s", exc.status_code, request.url.path, exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )
