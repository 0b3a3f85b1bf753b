"""
Router principal de l'API.
"""
from fastapi import APIRouter

from .routes import proxy

# Router principal
api_router = APIRouter()

# Catch-all: doit rester le dernier router inclus
api_router.include_router(proxy.router, prefix="", tags=["proxy"])
