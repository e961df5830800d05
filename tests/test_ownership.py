"""
리소스 소유권 확인 테스트
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

from src.auth.ownership import OwnershipChecker, read_owner
from src.auth.policies import ResourceOwnershipPolicy, SecurityPolicies
from src.auth.policy_provider import StaticPolicyProvider
from src.repositories.resource_repository import InMemoryResourceRepository


class TestOwnershipChecker:
    """OwnershipChecker 동작 테스트"""

    async def test_owner_matches(self, ownership_checker, mock_resource_repository):
        mock_resource_repository.find_by_id.return_value = {"id": "o-1", "user_id": "u1"}

        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is True
        mock_resource_repository.find_by_id.assert_awaited_once_with("orders", "o-1")

    async def test_other_owner_denied(self, ownership_checker, mock_resource_repository):
        mock_resource_repository.find_by_id.return_value = {"id": "o-1", "user_id": "u2"}
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_missing_resource_denied(self, ownership_checker):
        assert await ownership_checker.check_ownership("u1", "orders", "o-404") is False

    async def test_missing_ownership_field_denied(
        self, ownership_checker, mock_resource_repository
    ):
        mock_resource_repository.find_by_id.return_value = {"id": "o-1"}
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_lookup_error_denied_without_raising(
        self, ownership_checker, mock_resource_repository
    ):
        mock_resource_repository.find_by_id.side_effect = ConnectionResetError(
            "connection reset"
        )
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_unexpected_error_denied(
        self, ownership_checker, mock_resource_repository
    ):
        mock_resource_repository.find_by_id.side_effect = TimeoutError()
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_enforcement_disabled_always_allows(self):
        policies = SecurityPolicies.model_validate(
            {"rbac": {"resource_ownership": {"enforce_ownership": False}}}
        )
        repo = AsyncMock()
        checker = OwnershipChecker(StaticPolicyProvider(policies), repo)

        assert await checker.check_ownership("u1", "orders", "o-1") is True
        repo.find_by_id.assert_not_called()

    async def test_custom_ownership_field(self):
        policies = SecurityPolicies.model_validate(
            {"rbac": {"resource_ownership": {"ownership_field": "customer_id"}}}
        )
        repo = InMemoryResourceRepository()
        repo.register("orders", "o-1", {"customer_id": "u1", "user_id": "u9"})
        checker = OwnershipChecker(StaticPolicyProvider(policies), repo)

        assert await checker.check_ownership("u1", "orders", "o-1") is True
        assert await checker.check_ownership("u9", "orders", "o-1") is False

    async def test_object_resource_uses_attribute(
        self, ownership_checker, mock_resource_repository
    ):
        mock_resource_repository.find_by_id.return_value = SimpleNamespace(
            id="o-1", user_id="u1"
        )

        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is True
        assert await ownership_checker.check_ownership("u2", "orders", "o-1") is False

    async def test_resource_without_owner_denied_without_raising(
        self, ownership_checker, mock_resource_repository
    ):
        # 매핑도 아니고 소유자 속성도 없는 객체
        mock_resource_repository.find_by_id.return_value = object()
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_owner_accessor_error_denied(
        self, ownership_checker, mock_resource_repository
    ):
        class BrokenRecord:
            @property
            def user_id(self):
                raise RuntimeError("lazy load failed")

        mock_resource_repository.find_by_id.return_value = BrokenRecord()
        assert await ownership_checker.check_ownership("u1", "orders", "o-1") is False

    async def test_explicit_policy_skips_provider(
        self, ownership_checker, policy_provider, mock_resource_repository
    ):
        mock_resource_repository.find_by_id.return_value = {"customer_id": "u1"}
        policy = ResourceOwnershipPolicy(ownership_field="customer_id")

        assert (
            await ownership_checker.check_ownership(
                "u1", "orders", "o-1", ownership_policy=policy
            )
            is True
        )
        policy_provider.get_security_policies.assert_not_called()


class TestReadOwner:
    def test_mapping_and_object(self):
        assert read_owner({"user_id": "u1"}, "user_id") == "u1"
        assert read_owner(SimpleNamespace(user_id="u1"), "user_id") == "u1"

    def test_missing_owner_is_none(self):
        assert read_owner({}, "user_id") is None
        assert read_owner(object(), "user_id") is None


class TestInMemoryResourceRepository:
    async def test_register_find_remove(self):
        repo = InMemoryResourceRepository()
        repo.register("design_tasks", "d-1", {"user_id": "u1"})

        assert await repo.find_by_id("design_tasks", "d-1") == {
            "id": "d-1",
            "user_id": "u1",
        }
        assert await repo.find_by_id("orders", "d-1") is None
        assert repo.remove("design_tasks", "d-1") is True
        assert repo.remove("design_tasks", "d-1") is False
        assert len(repo) == 0
