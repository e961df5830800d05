"""
API Schemas Package
"""

from src.api.schemas.permissions import (
    CacheClearResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    PolicyReloadResponse,
    RolePermissionsResponse,
)

__all__ = [
    "PermissionCheckRequest",
    "PermissionCheckResponse",
    "RolePermissionsResponse",
    "PolicyReloadResponse",
    "CacheClearResponse",
]
