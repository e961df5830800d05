"""
도메인 예외 정의

애플리케이션 전역에서 사용되는 커스텀 예외 클래스를 정의합니다.

권한 판정(check_permission) 자체는 예외를 던지지 않고 PermissionResult로
거부 사유를 반환합니다. 아래 예외는 설정 로드 시점과 HTTP 경계에서만 사용됩니다.
"""


class ThreadCraftError(Exception):
    """ThreadCraft 애플리케이션 기본 예외"""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)


# ============================================
# 설정 관련 예외
# ============================================


class ConfigurationError(ThreadCraftError):
    """설정 오류 (보안 정책 파일 누락, 형식 오류, 상속 순환 등)"""

    def __init__(self, message: str, config_key: str = ""):
        self.config_key = config_key
        super().__init__(message, code="CONFIGURATION_ERROR")


# ============================================
# 인증/인가 관련 예외
# ============================================


class AuthenticationError(ThreadCraftError):
    """인증 실패 (로그인 필요)"""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message, code="AUTH_REQUIRED")


class AuthorizationError(ThreadCraftError):
    """인가 실패 (권한 부족)"""

    def __init__(
        self, message: str = "Permission denied", required_role: str | None = None
    ):
        self.required_role = required_role
        super().__init__(message, code="FORBIDDEN")
