from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from src.auth.permissions import build_required_permission

ADMIN_ROLE = "admin"
ANONYMOUS_USER_ID = "anonymous"


class PermissionCheck(BaseModel):
    """
    권한 확인 요청 값 객체

    호출마다 생성되며 불변입니다. action이 ":own"으로 끝나고 resource_id가
    주어지면 소유권 확인 대상이 됩니다.
    """

    model_config = ConfigDict(frozen=True)

    resource: str
    action: str
    resource_id: str | None = None
    user_id: str | None = None

    @property
    def required_permission(self) -> str:
        """"resource:action" 형식의 요구 권한"""
        return build_required_permission(self.resource, self.action)

    @property
    def requires_ownership(self) -> bool:
        """소유권 확인이 필요한 요청인지 여부"""
        return bool(self.resource_id) and self.action.endswith(":own")


class PermissionResult(BaseModel):
    """
    권한 판정 결과

    캐시에서 그대로 공유되므로 불변으로 둡니다.
    granted=False일 때 reason과 required_role은 운영자 진단용입니다.
    """

    model_config = ConfigDict(frozen=True)

    granted: bool
    reason: str | None = None
    required_role: str | None = None

    @classmethod
    def allow(cls, reason: str | None = None) -> PermissionResult:
        return cls(granted=True, reason=reason)

    @classmethod
    def deny(cls, reason: str, required_role: str | None = None) -> PermissionResult:
        return cls(granted=False, reason=reason, required_role=required_role)


class UserContext(BaseModel):
    """
    요청 컨텍스트에서 사용하는 사용자 정보

    AUTH_ENABLED=false일 때는 anonymous_admin()이 반환되어
    관리자 역할로 동작합니다.
    """

    user_id: str
    role: str

    @classmethod
    def from_demo_role(cls, role: str) -> UserContext:
        """X-Demo-Role 헤더로 전달된 역할에 대한 데모 UserContext 생성"""
        return cls(user_id=f"demo_{role}", role=role)

    @classmethod
    def anonymous_admin(cls) -> UserContext:
        """AUTH_ENABLED=false일 때 사용되는 익명 관리자 컨텍스트"""
        return cls(user_id=ANONYMOUS_USER_ID, role=ADMIN_ROLE)
