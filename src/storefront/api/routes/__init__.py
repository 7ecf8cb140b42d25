"""
API routes package.

Each module defines one router; ``api_router`` combines them under ``/api``.
"""

from fastapi import APIRouter

from . import admin, auth, contact, inventory, products, users

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(products.router)
api_router.include_router(inventory.router)
api_router.include_router(admin.router)
api_router.include_router(users.router)
api_router.include_router(contact.router)

__all__ = ["api_router"]
