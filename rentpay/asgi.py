"""
ASGI entrypoint: expose `app` pour les process managers / déploiements
(ex: uvicorn rentpay.asgi:app). Toute la configuration est dans rentpay.app_setup.
"""

from rentpay.app_setup import create_app

app = create_app()
