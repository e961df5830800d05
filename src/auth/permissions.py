"""
권한 매칭 로직

와일드카드(*) 패턴을 지원하는 권한 매칭을 제공합니다.

권한 문자열은 "resource:action" 형식이며 매칭 규칙은 다음과 같습니다:
- 완전 일치 → 허용
- "*" → 모든 권한 허용 (admin용)
- "orders:*" → "orders:read", "orders:update" 등 매칭 (리소스 고정, 액션 와일드카드)
- "*:read" → "orders:read", "catalog:read" 등 매칭 (액션 고정, 리소스 와일드카드)
"""

GLOBAL_WILDCARD = "*"
PERMISSION_SEPARATOR = ":"


def build_required_permission(resource: str, action: str) -> str:
    """리소스와 액션으로 요구 권한 문자열 생성"""
    return f"{resource}{PERMISSION_SEPARATOR}{action}"


def matches_wildcard(granted: str, required: str) -> bool:
    """
    부여된 권한이 요구 권한을 만족하는지 확인

    순수 함수이며 어떤 입력에도 예외를 던지지 않습니다.

    Args:
        granted: 역할에 부여된 권한 패턴 (와일드카드 가능)
        required: 요구되는 권한 (정확한 값)

    Returns:
        True면 매칭됨

    Examples:
        >>> matches_wildcard("*", "orders:update")
        True
        >>> matches_wildcard("orders:*", "orders:update")
        True
        >>> matches_wildcard("orders:*", "catalog:update")
        False
        >>> matches_wildcard("*:read", "catalog:read")
        True
        >>> matches_wildcard("*:read", "catalog:write")
        False
    """
    if granted == required:
        return True

    if granted == GLOBAL_WILDCARD:
        return True

    if granted.endswith(PERMISSION_SEPARATOR + GLOBAL_WILDCARD):
        prefix = granted[:-2]
        return required.startswith(prefix + PERMISSION_SEPARATOR)

    if granted.startswith(GLOBAL_WILDCARD + PERMISSION_SEPARATOR):
        suffix = granted[2:]
        return required.endswith(PERMISSION_SEPARATOR + suffix)

    return False
