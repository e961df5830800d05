"""
Permission Cache - 권한 판정 결과 TTL 캐시

책임:
- (user, role, resource, action, resource_id) 조합별 판정 결과 캐싱
- 만료 항목은 다음 조회 시점에 지연 삭제 (백그라운드 정리 없음)
- 정책 변경 후 전체 무효화 (세대 번호로 무효화 이전에 시작된 평가의 저장을 차단)
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from src.auth.models import PermissionResult

logger = logging.getLogger(__name__)

DEFAULT_PERMISSION_CACHE_TTL_SECONDS = 5 * 60
NO_RESOURCE_ID = "none"


def build_cache_key(
    user_id: str,
    user_role: str,
    resource: str,
    action: str,
    resource_id: str | None = None,
) -> str:
    """캐시 키 생성: userId:role:resource:action:resourceId(없으면 "none")"""
    return f"{user_id}:{user_role}:{resource}:{action}:{resource_id or NO_RESOURCE_ID}"


@dataclass(frozen=True)
class CachedPermission:
    """캐시된 판정 결과와 만료 시각"""

    result: PermissionResult
    expires_at: float


class PermissionCache:
    """
    프로세스 내 권한 판정 캐시

    단일 dict 연산만 사용하므로 키 단위 조회/저장은 서로 원자적입니다.
    동시에 같은 키를 평가하는 경합은 중복 평가로 끝나며 결과는 동일합니다.
    clear()는 세대 번호를 올리므로, 평가 전에 읽은 세대를 set()에 넘기면
    무효화 이전 정책으로 계산된 결과가 캐시에 다시 들어가지 않습니다.

    사용 예시:
        cache = PermissionCache(ttl_seconds=300)
        key = build_cache_key(user_id, role, "orders", "read")

        cached = cache.get(key)
        if cached is None:
            generation = cache.generation
            cached = await evaluate(...)
            cache.set(key, cached, generation=generation)
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_PERMISSION_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CachedPermission] = {}
        self._generation = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def generation(self) -> int:
        """clear() 호출마다 증가하는 세대 번호"""
        return self._generation

    def get(self, key: str) -> PermissionResult | None:
        """만료 전이면 캐시된 결과 반환, 만료됐으면 삭제 후 None"""
        entry = self._entries.get(key)
        if entry is None:
            return None

        if self._clock() < entry.expires_at:
            return entry.result

        self._entries.pop(key, None)
        logger.debug(f"Permission cache entry expired: {key}")
        return None

    def set(
        self, key: str, result: PermissionResult, generation: int | None = None
    ) -> None:
        """
        결과 저장 (기존 항목 덮어쓰기)

        Args:
            generation: 평가 시작 시점의 세대 번호. 그 사이 clear()가 호출됐으면 저장하지 않음
        """
        if generation is not None and generation != self._generation:
            logger.debug(f"Dropping stale permission cache write: {key}")
            return

        self._entries[key] = CachedPermission(
            result=result,
            expires_at=self._clock() + self._ttl,
        )

    def clear(self) -> None:
        """전체 항목 삭제"""
        count = len(self._entries)
        self._entries.clear()
        self._generation += 1
        logger.info(f"Permission cache cleared ({count} entries)")

    def __len__(self) -> int:
        return len(self._entries)
