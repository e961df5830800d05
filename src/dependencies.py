"""
FastAPI 의존성 주입 모듈

FastAPI의 Depends 패턴을 활용한 의존성 주입을 관리합니다.

의존성 흐름:
    Settings -> PolicyProvider / ResourceRepository -> OwnershipChecker -> RBACEngine
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, Request

from src.auth.models import PermissionCheck, UserContext
from src.auth.policy_provider import SecurityPolicyProvider
from src.auth.rbac_engine import RBACEngine
from src.config import get_settings
from src.domain.exceptions import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

USER_ID_HEADER = "X-User-Id"
USER_ROLE_HEADER = "X-User-Role"
DEMO_ROLE_HEADER = "X-Demo-Role"


# ============================================
# Policy Layer 의존성
# ============================================


def get_policy_provider(request: Request) -> SecurityPolicyProvider:
    """보안 정책 Provider 의존성 주입"""
    return request.app.state.policy_provider


# ============================================
# Engine 의존성
# ============================================


def get_rbac_engine(request: Request) -> RBACEngine:
    """RBACEngine 의존성 주입"""
    return request.app.state.rbac_engine


# ============================================
# 인증 관련 의존성
# ============================================


async def get_current_user(request: Request) -> UserContext:
    """
    현재 요청의 사용자 컨텍스트를 반환

    AUTH_ENABLED=false (데모/개발 모드):
        X-Demo-Role 헤더 → 데모 UserContext (정책에 정의된 역할만)
        헤더 없음 → anonymous_admin

    AUTH_ENABLED=true:
        인증 게이트웨이가 설정한 X-User-Id / X-User-Role 헤더 필수

    Raises:
        AuthenticationError: 사용자 식별 헤더 누락
    """
    settings = get_settings()

    if not settings.auth_enabled:
        demo_role = request.headers.get(DEMO_ROLE_HEADER)
        if demo_role:
            policies = request.app.state.policy_provider.get_security_policies()
            if demo_role in policies.rbac.roles:
                return UserContext.from_demo_role(demo_role)
        return UserContext.anonymous_admin()

    user_id = request.headers.get(USER_ID_HEADER, "").strip()
    role = request.headers.get(USER_ROLE_HEADER, "").strip()
    if not user_id or not role:
        raise AuthenticationError(
            f"Missing {USER_ID_HEADER} or {USER_ROLE_HEADER} header"
        )

    return UserContext(user_id=user_id, role=role)


def require_permission(
    resource: str,
    action: str,
    resource_id_param: str | None = None,
) -> Callable[..., Awaitable[UserContext]]:
    """
    권한 확인 의존성 팩토리

    Args:
        resource: 리소스 이름
        action: 액션 (":own"으로 끝나면 소유권 확인)
        resource_id_param: 리소스 ID를 담은 path 파라미터 이름

    Returns:
        허용 시 UserContext를 반환하는 의존성

    Raises:
        AuthorizationError: 판정 결과가 거부인 경우 (403)

    Example:
        @router.get("/orders/{order_id}")
        async def get_order(
            user: Annotated[
                UserContext, Depends(require_permission("orders", "read:own", "order_id"))
            ],
        ): ...
    """

    async def dependency(
        request: Request,
        user: Annotated[UserContext, Depends(get_current_user)],
        engine: Annotated[RBACEngine, Depends(get_rbac_engine)],
    ) -> UserContext:
        resource_id = (
            request.path_params.get(resource_id_param) if resource_id_param else None
        )
        check = PermissionCheck(
            resource=resource,
            action=action,
            resource_id=resource_id,
            user_id=user.user_id,
        )
        result = await engine.check_permission(user.user_id, user.role, check)
        if not result.granted:
            raise AuthorizationError(
                result.reason or "Permission denied",
                required_role=result.required_role,
            )
        return user

    return dependency
