"""
Resource Repository — 소유권 확인용 리소스 조회 계층

리소스 타입(orders, design_tasks, messages 등)과 ID로 리소스를 조회합니다.
영속 저장소 구현은 애플리케이션이 주입하며, 기본 제공 구현은 메모리 기반입니다.
"""

import logging
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class ResourceRepository(Protocol):
    """타입 + ID 기반 리소스 조회 인터페이스"""

    async def find_by_id(
        self, resource_type: str, resource_id: str
    ) -> dict[str, Any] | None: ...


class InMemoryResourceRepository:
    """메모리 기반 리소스 저장소"""

    def __init__(self) -> None:
        self._resources: dict[tuple[str, str], dict[str, Any]] = {}

    async def find_by_id(
        self, resource_type: str, resource_id: str
    ) -> dict[str, Any] | None:
        """리소스 조회 (없으면 None)"""
        resource = self._resources.get((resource_type, resource_id))
        return dict(resource) if resource is not None else None

    def register(
        self, resource_type: str, resource_id: str, data: dict[str, Any]
    ) -> None:
        """리소스 등록 (같은 키는 덮어쓰기)"""
        self._resources[(resource_type, resource_id)] = {"id": resource_id, **data}
        logger.debug(f"Registered resource {resource_type}/{resource_id}")

    def remove(self, resource_type: str, resource_id: str) -> bool:
        """리소스 삭제, 존재했으면 True"""
        return self._resources.pop((resource_type, resource_id), None) is not None

    def __len__(self) -> int:
        return len(self._resources)
