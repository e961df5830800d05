"""
리소스 소유권 확인

정책의 ownership_field 값이 요청 사용자 ID와 일치하는지 확인합니다.
조회 실패는 예외로 전파하지 않고 소유권 없음(거부)으로 처리합니다.
"""

import logging
from collections.abc import Mapping
from typing import Any

from src.auth.policies import ResourceOwnershipPolicy
from src.auth.policy_provider import PolicyProvider
from src.repositories.resource_repository import ResourceRepository

logger = logging.getLogger(__name__)


def read_owner(resource: Any, ownership_field: str) -> Any:
    """매핑이면 키로, 그 외 객체는 속성으로 소유자 값 조회 (없으면 None)"""
    if isinstance(resource, Mapping):
        return resource.get(ownership_field)
    return getattr(resource, ownership_field, None)


class OwnershipChecker:
    """리소스 소유권 확인기"""

    def __init__(
        self,
        policy_provider: PolicyProvider,
        resource_repository: ResourceRepository,
    ):
        self._policies = policy_provider
        self._resources = resource_repository

    async def check_ownership(
        self,
        user_id: str,
        resource_type: str,
        resource_id: str,
        ownership_policy: ResourceOwnershipPolicy | None = None,
    ) -> bool:
        """
        사용자가 리소스 소유자인지 확인

        Args:
            user_id: 요청 사용자 ID
            resource_type: 리소스 타입 (PermissionCheck.resource)
            resource_id: 리소스 ID
            ownership_policy: 호출자가 이미 읽은 정책 스냅샷의 소유권 정책.
                None이면 provider에서 읽음

        Returns:
            소유권 정책이 꺼져 있으면 항상 True.
            리소스가 없거나 조회/소유자 확인에 실패하면 False.
        """
        ownership = ownership_policy
        if ownership is None:
            ownership = self._policies.get_security_policies().rbac.resource_ownership

        if not ownership.enforce_ownership:
            return True

        try:
            resource = await self._resources.find_by_id(resource_type, resource_id)
            if resource is None:
                logger.info(
                    f"Ownership check failed: {resource_type}/{resource_id} not found"
                )
                return False
            owner = read_owner(resource, ownership.ownership_field)
        except Exception as e:
            logger.error(
                f"Error checking resource ownership for "
                f"{resource_type}/{resource_id}: {e}"
            )
            return False

        return owner is not None and owner == user_id
