"""
Registre central des routers (API v1 payments, health).
"""
from fastapi import FastAPI
from rentpay.payments import views as payments_views
from rentpay.health.router import router as health_router

def register_routers(app: FastAPI) -> None:
    # API v1
    app.include_router(payments_views.router)
    # Health & monitoring
    app.include_router(health_router)
