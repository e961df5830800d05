"""
보안 정책 모델

security_policies.yaml 문서 구조를 Pydantic 모델로 정의합니다.
키는 snake_case와 camelCase(resourceOwnership, adminBypass 등)를 모두 허용합니다.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.auth.permissions import GLOBAL_WILDCARD, PERMISSION_SEPARATOR


class PolicyModel(BaseModel):
    """정책 문서 공통 설정 (불변, camelCase 별칭 허용)"""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def validate_permission_string(permission: str) -> str:
    """
    권한 문자열 형식 검증

    "*" 이거나, 비어있지 않은 세그먼트 두 개 이상을 ":"로 연결한 형식이어야 합니다.
    (예: "orders:read", "orders:*", "*:read", "orders:read:own")
    """
    if permission == GLOBAL_WILDCARD:
        return permission

    segments = permission.split(PERMISSION_SEPARATOR)
    if len(segments) < 2 or any(
        not segment or segment != segment.strip() or " " in segment
        for segment in segments
    ):
        raise ValueError(
            f"Invalid permission string: '{permission}'. "
            "Expected '*' or 'resource:action'."
        )
    return permission


class RoleDefinition(PolicyModel):
    """역할 정의: 권한 목록 + 선택적 상위 역할"""

    permissions: list[str] = Field(default_factory=list, description="권한 문자열 목록")
    description: str = Field(default="", description="역할 설명")
    inherits_from: str | None = Field(
        default=None,
        description="상위 역할 이름 (로드 시점에 권한 목록으로 평탄화됨)",
    )

    @field_validator("permissions")
    @classmethod
    def validate_permissions(cls, v: list[str]) -> list[str]:
        return [validate_permission_string(p) for p in v]


class ResourceOwnershipPolicy(PolicyModel):
    """리소스 소유권 정책"""

    enforce_ownership: bool = Field(default=True, description="소유권 검사 활성화 여부")
    ownership_field: str = Field(
        default="user_id",
        min_length=1,
        description="리소스에서 소유자 ID를 담은 필드명",
    )
    admin_bypass: bool = Field(
        default=False,
        description="admin 역할의 무조건 허용 여부",
    )


class RBACPolicy(PolicyModel):
    """역할 기반 접근 제어 정책"""

    roles: dict[str, RoleDefinition] = Field(default_factory=dict)
    resource_ownership: ResourceOwnershipPolicy = Field(
        default_factory=ResourceOwnershipPolicy
    )


class SecurityPolicies(PolicyModel):
    """보안 정책 문서 루트"""

    version: str = Field(default="1.0", description="정책 문서 버전")
    rbac: RBACPolicy = Field(default_factory=RBACPolicy)
