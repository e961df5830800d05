"""
API Package
"""

from .routes.permissions import router as permissions_router

__all__ = [
    "permissions_router",
]
