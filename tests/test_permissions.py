"""
와일드카드 권한 매칭 테스트
"""

import pytest

from src.auth.permissions import build_required_permission, matches_wildcard


class TestMatchesWildcard:
    """matches_wildcard 규칙 테스트"""

    def test_exact_match(self):
        assert matches_wildcard("orders:read", "orders:read") is True

    def test_global_wildcard(self):
        assert matches_wildcard("*", "anything:here") is True
        assert matches_wildcard("*", "") is True

    def test_resource_wildcard(self):
        assert matches_wildcard("orders:*", "orders:update") is True
        assert matches_wildcard("orders:*", "orders:read:own") is True
        assert matches_wildcard("orders:*", "catalog:update") is False

    def test_resource_wildcard_requires_full_segment(self):
        """"order:*"는 "orders:read"와 매칭되지 않음"""
        assert matches_wildcard("order:*", "orders:read") is False

    def test_action_wildcard(self):
        assert matches_wildcard("*:read", "catalog:read") is True
        assert matches_wildcard("*:read", "catalog:write") is False

    def test_action_wildcard_requires_full_segment(self):
        assert matches_wildcard("*:read", "catalog:unread") is False

    def test_no_match(self):
        assert matches_wildcard("orders:read", "orders:update") is False
        assert matches_wildcard("catalog:read", "orders:read") is False

    @pytest.mark.parametrize(
        "granted,required",
        [
            ("", ""),
            ("", "orders:read"),
            (":", ":"),
            (":*", "orders:read"),
            ("*:", "orders:"),
            ("::*", ":"),
            ("*:*", "x"),
            ("orders:read", ""),
            ("é:*", "é:read"),
        ],
    )
    def test_total_on_odd_inputs(self, granted, required):
        """비정상 입력에도 예외 없이 bool 반환"""
        assert isinstance(matches_wildcard(granted, required), bool)

    def test_both_segments_wildcard(self):
        """"*:*"는 리소스 와일드카드 규칙이 먼저 적용되어 리소스 "*"만 매칭"""
        assert matches_wildcard("*:*", "*:read") is True
        assert matches_wildcard("*:*", "orders:read") is False


class TestBuildRequiredPermission:
    def test_joins_resource_and_action(self):
        assert build_required_permission("orders", "read") == "orders:read"
        assert build_required_permission("orders", "read:own") == "orders:read:own"
