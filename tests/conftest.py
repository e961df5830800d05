"""
Test Configuration

테스트 공통 fixture 정의 — 외부 의존성(리소스 저장소, 시계)을 mock으로 대체합니다.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from src.auth.ownership import OwnershipChecker
from src.auth.permission_cache import PermissionCache
from src.auth.policies import SecurityPolicies
from src.auth.policy_provider import StaticPolicyProvider
from src.auth.rbac_engine import RBACEngine


class FakeClock:
    """수동으로 시간을 진행시키는 테스트용 시계"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def sample_policy_document():
    """테스트용 보안 정책 문서"""
    return {
        "version": "test",
        "rbac": {
            "roles": {
                "admin": {"permissions": ["system:configure"]},
                "salesperson": {"permissions": ["orders:*", "catalog:read"]},
                "designer": {"permissions": ["design_tasks:*", "*:read"]},
                "customer": {
                    "permissions": ["orders:read:own", "orders:create", "catalog:read"]
                },
                "catalog_manager": {"permissions": ["catalog:*"]},
            },
            "resource_ownership": {
                "enforce_ownership": True,
                "ownership_field": "user_id",
                "admin_bypass": True,
            },
        },
    }


@pytest.fixture
def sample_policies(sample_policy_document):
    return SecurityPolicies.model_validate(sample_policy_document)


@pytest.fixture
def policy_provider(sample_policies):
    """호출 횟수를 확인할 수 있는 정책 Provider"""
    return MagicMock(wraps=StaticPolicyProvider(sample_policies))


@pytest.fixture
def mock_resource_repository():
    """ResourceRepository mock (기본: 리소스 없음)"""
    repo = AsyncMock()
    repo.find_by_id.return_value = None
    return repo


@pytest.fixture
def ownership_checker(policy_provider, mock_resource_repository):
    return OwnershipChecker(policy_provider, mock_resource_repository)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def permission_cache(fake_clock):
    return PermissionCache(ttl_seconds=300, clock=fake_clock)


@pytest.fixture
def rbac_engine(policy_provider, ownership_checker, permission_cache):
    return RBACEngine(
        policy_provider=policy_provider,
        ownership_checker=ownership_checker,
        cache=permission_cache,
    )
