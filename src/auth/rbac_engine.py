"""
RBAC Engine — 역할 기반 권한 판정

(user, role, resource, action) 조합에 대해 작업 허용 여부를 판정합니다.

판정 순서 (캐시 미스 시):
1. 역할 존재 확인 → 없으면 거부
2. admin bypass → 허용 (소유권 확인 포함 모든 검사 생략)
3. 와일드카드 매칭으로 권한 보유 확인 → 없으면 거부 (충족 가능한 역할 안내)
4. ":own" 액션 + resource_id → 소유권 확인, 실패 시 거부
5. 허용

캐시 적중 시 소유권을 다시 확인하지 않습니다. 소유권 변경은 TTL 내에 반영되지 않을 수 있습니다.
"""

import logging
from collections.abc import Mapping

from src.auth.models import ADMIN_ROLE, PermissionCheck, PermissionResult
from src.auth.ownership import OwnershipChecker
from src.auth.permission_cache import PermissionCache, build_cache_key
from src.auth.permissions import matches_wildcard
from src.auth.policies import RoleDefinition
from src.auth.policy_provider import PolicyProvider

logger = logging.getLogger(__name__)

INVALID_ROLE_HINT = "valid_role"


class RBACEngine:
    """
    권한 판정 엔진

    애플리케이션이 프로세스당 하나를 생성해 요청 처리 계층에 주입합니다.
    테스트에서는 독립 인스턴스를 자유롭게 만들 수 있습니다.

    사용 예시:
        engine = RBACEngine(policy_provider, ownership_checker, PermissionCache())

        result = await engine.check_permission(
            user_id, "salesperson", PermissionCheck(resource="orders", action="create")
        )
        if not result.granted:
            raise AuthorizationError(result.reason, result.required_role)
    """

    def __init__(
        self,
        policy_provider: PolicyProvider,
        ownership_checker: OwnershipChecker,
        cache: PermissionCache | None = None,
    ):
        self._policies = policy_provider
        self._ownership = ownership_checker
        self._cache = cache if cache is not None else PermissionCache()

    @property
    def cache(self) -> PermissionCache:
        return self._cache

    async def check_permission(
        self, user_id: str, user_role: str, check: PermissionCheck
    ) -> PermissionResult:
        """
        캐시를 거쳐 권한 판정

        Returns:
            PermissionResult (예외를 던지지 않으며, 호출자는 granted를 확인해야 함)
        """
        cache_key = build_cache_key(
            user_id, user_role, check.resource, check.action, check.resource_id
        )

        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Permission cache hit: {cache_key}")
            return cached

        # 평가 중 clear_cache()가 호출되면 이전 정책의 결과는 저장하지 않음
        generation = self._cache.generation
        result = await self.evaluate_permission(user_id, user_role, check)
        self._cache.set(cache_key, result, generation=generation)
        return result

    async def evaluate_permission(
        self, user_id: str, user_role: str, check: PermissionCheck
    ) -> PermissionResult:
        """캐시 없이 정책으로부터 권한 판정 (정책 스냅샷은 한 번만 읽음)"""
        policies = self._policies.get_security_policies()
        rbac = policies.rbac

        role = rbac.roles.get(user_role)
        if role is None:
            logger.info(f"Permission denied for user {user_id}: unknown role '{user_role}'")
            return PermissionResult.deny(
                f"Role '{user_role}' not found", required_role=INVALID_ROLE_HINT
            )

        if rbac.resource_ownership.admin_bypass and user_role == ADMIN_ROLE:
            return PermissionResult.allow(reason="Admin bypass")

        required_permission = check.required_permission
        has_permission = any(
            matches_wildcard(permission, required_permission)
            for permission in role.permissions
        )

        if not has_permission:
            logger.info(
                f"Permission denied for user {user_id} (role={user_role}): "
                f"missing {required_permission}"
            )
            return PermissionResult.deny(
                f"Missing permission: {required_permission}",
                required_role=self._find_role_with_permission(
                    required_permission, rbac.roles
                ),
            )

        if check.requires_ownership:
            owns_resource = await self._ownership.check_ownership(
                user_id,
                check.resource,
                check.resource_id,
                ownership_policy=rbac.resource_ownership,
            )
            if not owns_resource:
                logger.info(
                    f"Permission denied for user {user_id} (role={user_role}): "
                    f"not owner of {check.resource}/{check.resource_id}"
                )
                return PermissionResult.deny(
                    "Resource ownership required", required_role=user_role
                )

        return PermissionResult.allow()

    def get_user_permissions(self, user_role: str) -> list[str]:
        """역할의 평탄화된 권한 목록 (없는 역할이면 빈 목록)"""
        role = self._policies.get_security_policies().rbac.roles.get(user_role)
        if role is None:
            return []
        return list(role.permissions)

    def matches_wildcard(self, permission: str, required: str) -> bool:
        return matches_wildcard(permission, required)

    async def check_resource_ownership(
        self, user_id: str, resource_type: str, resource_id: str
    ) -> bool:
        return await self._ownership.check_ownership(
            user_id, resource_type, resource_id
        )

    def clear_cache(self) -> None:
        """정책 변경 후 즉시 반영을 위해 전체 캐시 무효화"""
        self._cache.clear()

    def _find_role_with_permission(
        self, permission: str, roles: Mapping[str, RoleDefinition]
    ) -> str:
        """요구 권한을 충족하는 첫 번째 역할 (없으면 admin)"""
        for role_name, role in roles.items():
            if any(matches_wildcard(p, permission) for p in role.permissions):
                return role_name
        return ADMIN_ROLE
