"""
Permission API - 권한 확인 및 정책 관리

엔드포인트:
1. POST   /check          - 현재 사용자 기준 권한 판정
2. GET    /me             - 현재 사용자 역할의 권한 목록
3. GET    /roles/{role}   - 역할별 권한 목록 (roles:read)
4. POST   /reload         - 정책 재로드 + 캐시 초기화 (system:configure)
5. DELETE /cache          - 캐시 초기화 (system:configure)
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.schemas.permissions import (
    CacheClearResponse,
    PermissionCheckRequest,
    PermissionCheckResponse,
    PolicyReloadResponse,
    RolePermissionsResponse,
)
from src.auth.models import PermissionCheck, UserContext
from src.auth.policy_provider import SecurityPolicyProvider
from src.auth.rbac_engine import RBACEngine
from src.dependencies import (
    get_current_user,
    get_policy_provider,
    get_rbac_engine,
    require_permission,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/permissions", tags=["permissions"])


# ============================================
# 권한 판정 / 조회
# ============================================


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permission(
    body: PermissionCheckRequest,
    user: Annotated[UserContext, Depends(get_current_user)],
    engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
) -> PermissionCheckResponse:
    """
    현재 사용자 기준 권한 판정

    거부도 200으로 반환합니다. (진단용, 호출자는 granted 확인)
    """
    check = PermissionCheck(
        resource=body.resource,
        action=body.action,
        resource_id=body.resource_id,
        user_id=user.user_id,
    )
    result = await engine.check_permission(user.user_id, user.role, check)
    return PermissionCheckResponse.from_result(
        user.user_id, user.role, check.required_permission, result
    )


@router.get("/me", response_model=RolePermissionsResponse)
async def get_my_permissions(
    user: Annotated[UserContext, Depends(get_current_user)],
    engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
) -> RolePermissionsResponse:
    """현재 사용자 역할의 권한 목록"""
    return RolePermissionsResponse(
        role=user.role, permissions=engine.get_user_permissions(user.role)
    )


@router.get("/roles/{role}", response_model=RolePermissionsResponse)
async def get_role_permissions(
    role: str,
    user: Annotated[UserContext, Depends(require_permission("roles", "read"))],
    engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
    provider: Annotated[SecurityPolicyProvider, Depends(get_policy_provider)],
) -> RolePermissionsResponse:
    """역할별 권한 목록"""
    if role not in provider.get_security_policies().rbac.roles:
        raise HTTPException(status_code=404, detail=f"Role '{role}' not found")
    return RolePermissionsResponse(
        role=role, permissions=engine.get_user_permissions(role)
    )


# ============================================
# 정책 관리
# ============================================


@router.post("/reload", response_model=PolicyReloadResponse)
async def reload_policies(
    user: Annotated[
        UserContext, Depends(require_permission("system", "configure"))
    ],
    engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
    provider: Annotated[SecurityPolicyProvider, Depends(get_policy_provider)],
) -> PolicyReloadResponse:
    """정책 파일 재로드 후 캐시 초기화"""
    policies = provider.reload()
    engine.clear_cache()
    logger.info(
        f"Security policies reloaded by {user.user_id} (version={policies.version})"
    )
    return PolicyReloadResponse(
        version=policies.version,
        roles=list(policies.rbac.roles),
        cache_cleared=True,
    )


@router.delete("/cache", response_model=CacheClearResponse, status_code=status.HTTP_200_OK)
async def clear_permission_cache(
    user: Annotated[
        UserContext, Depends(require_permission("system", "configure"))
    ],
    engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
) -> CacheClearResponse:
    """권한 캐시 초기화"""
    cleared = len(engine.cache)
    engine.clear_cache()
    logger.info(f"Permission cache cleared by {user.user_id}")
    return CacheClearResponse(cleared_entries=cleared)
