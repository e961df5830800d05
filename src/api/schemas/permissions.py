"""
Permission API 스키마

권한 확인/조회 및 정책 관리 엔드포인트의 Request/Response 모델을 정의합니다.
"""

from pydantic import BaseModel, Field

from src.auth.models import PermissionResult

# ============================================
# Request Models
# ============================================


class PermissionCheckRequest(BaseModel):
    """권한 확인 요청 (현재 사용자 기준)"""

    resource: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="리소스 이름 (예: orders)",
    )
    action: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="액션 (예: read, update:own)",
    )
    resource_id: str | None = Field(
        default=None,
        max_length=200,
        description="대상 리소스 ID (소유권 확인용)",
    )


# ============================================
# Response Models
# ============================================


class PermissionCheckResponse(BaseModel):
    """권한 확인 결과"""

    user_id: str = Field(description="판정 대상 사용자 ID")
    role: str = Field(description="판정 대상 역할")
    permission: str = Field(description="요구 권한 (resource:action)")
    granted: bool = Field(description="허용 여부")
    reason: str | None = Field(default=None, description="거부 사유")
    required_role: str | None = Field(default=None, description="충족 가능한 역할")

    @classmethod
    def from_result(
        cls, user_id: str, role: str, permission: str, result: PermissionResult
    ) -> "PermissionCheckResponse":
        return cls(
            user_id=user_id,
            role=role,
            permission=permission,
            granted=result.granted,
            reason=result.reason,
            required_role=result.required_role,
        )


class RolePermissionsResponse(BaseModel):
    """역할별 권한 목록"""

    role: str = Field(description="역할 이름")
    permissions: list[str] = Field(default=[], description="평탄화된 권한 목록")


class PolicyReloadResponse(BaseModel):
    """정책 재로드 결과"""

    version: str = Field(description="정책 문서 버전")
    roles: list[str] = Field(default=[], description="로드된 역할 목록")
    cache_cleared: bool = Field(default=True, description="캐시 초기화 여부")


class CacheClearResponse(BaseModel):
    """캐시 초기화 결과"""

    cleared_entries: int = Field(description="삭제된 캐시 항목 수")
