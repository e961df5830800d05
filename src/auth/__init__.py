from src.auth.models import PermissionCheck, PermissionResult, UserContext
from src.auth.ownership import OwnershipChecker
from src.auth.permission_cache import PermissionCache
from src.auth.permissions import matches_wildcard
from src.auth.policy_provider import SecurityPolicyProvider, StaticPolicyProvider
from src.auth.rbac_engine import RBACEngine

__all__ = [
    "OwnershipChecker",
    "PermissionCache",
    "PermissionCheck",
    "PermissionResult",
    "RBACEngine",
    "SecurityPolicyProvider",
    "StaticPolicyProvider",
    "UserContext",
    "matches_wildcard",
]
