"""
보안 정책 Provider

외부 YAML 파일에서 역할/권한 정책을 로드하고 관리합니다.

로드 순서:
1. YAML 문서 로드 (security_policies.yaml)
2. environments.<env> 섹션을 기본 문서 위에 deep merge
3. SECURITY_POLICY__ 접두사 환경변수로 개별 값 덮어쓰기 (.env 파일 값 위에 프로세스 환경변수)
4. Pydantic 검증
5. inherits_from 평탄화 (엔진은 평탄화된 권한 목록만 읽음)

reload()는 새 스냅샷을 만든 뒤 한 번에 교체하므로, 실패 시 기존 정책이 유지됩니다.
"""

import json
import logging
import os
import threading
from collections.abc import Mapping
from copy import deepcopy
from pathlib import Path
from typing import Any, Protocol

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from src.auth.policies import RoleDefinition, SecurityPolicies
from src.domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_ENV_PREFIX = "SECURITY_POLICY__"
ENVIRONMENTS_KEY = "environments"
PATH_DELIMITER = "__"


class PolicyProvider(Protocol):
    """RBAC 엔진이 의존하는 정책 조회 인터페이스"""

    def get_security_policies(self) -> SecurityPolicies: ...


class StaticPolicyProvider:
    """메모리상의 정책을 그대로 제공 (임베딩/테스트용)"""

    def __init__(self, policies: SecurityPolicies):
        self._policies = with_flattened_roles(policies)

    def get_security_policies(self) -> SecurityPolicies:
        return self._policies


# ============================================
# 문서 변환 유틸리티
# ============================================


def deep_merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """중첩 dict 병합 (override 우선, 리스트는 통째로 교체)"""
    result = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(result.get(key), dict):
            result[key] = deep_merge(result[key], value)
        elif value is not None:
            result[key] = deepcopy(value)
    return result


def _normalize_key(key: str) -> str:
    return key.replace("_", "").lower()


def _find_key(node: dict[str, Any], part: str) -> str:
    """snake_case/camelCase 구분 없이 기존 키 탐색, 없으면 part 그대로 사용"""
    target = _normalize_key(part)
    for existing in node:
        if isinstance(existing, str) and _normalize_key(existing) == target:
            return existing
    return part


def _parse_env_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def apply_environment_overrides(
    document: dict[str, Any],
    prefix: str = DEFAULT_ENV_PREFIX,
    environ: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """
    환경변수로 정책 값 덮어쓰기

    예: SECURITY_POLICY__RBAC__RESOURCE_OWNERSHIP__ADMIN_BYPASS=false
        → document["rbac"]["resource_ownership"]["admin_bypass"] = False

    값은 JSON으로 파싱하고, 실패하면 문자열로 사용합니다.
    """
    environ = os.environ if environ is None else environ
    result = deepcopy(document)

    for env_key in sorted(environ):
        if not env_key.startswith(prefix):
            continue
        raw_value = environ[env_key]
        if not raw_value:
            continue

        parts = [p.lower() for p in env_key[len(prefix) :].split(PATH_DELIMITER) if p]
        if not parts:
            continue

        current = result
        for part in parts[:-1]:
            key = _find_key(current, part)
            if not isinstance(current.get(key), dict):
                current[key] = {}
            current = current[key]

        current[_find_key(current, parts[-1])] = _parse_env_value(raw_value)
        logger.debug(f"Applied security policy override from {env_key}")

    return result


def load_override_environ(
    env_file: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> dict[str, str]:
    """
    정책 오버라이드에 사용할 환경변수 맵 생성

    Settings와 같은 우선순위: .env 파일 값 위에 프로세스 환경변수를 덮어씁니다.
    값이 없는 .env 항목(KEY만 있는 줄)은 제외합니다.

    Args:
        env_file: .env 파일 경로 (None이거나 파일이 없으면 무시)
        environ: 프로세스 환경변수 (기본: os.environ)
    """
    merged: dict[str, str] = {}
    if env_file is not None and Path(env_file).is_file():
        merged.update(
            {k: v for k, v in dotenv_values(env_file).items() if v is not None}
        )
    merged.update(os.environ if environ is None else environ)
    return merged


def flatten_role_inheritance(
    roles: Mapping[str, RoleDefinition],
) -> dict[str, RoleDefinition]:
    """
    inherits_from 체인을 따라 권한 목록 평탄화

    자기 권한 → 상위 역할 권한 순서로 합치며 중복은 제거합니다.

    Raises:
        ConfigurationError: 존재하지 않는 상위 역할 또는 순환 상속
    """
    resolved: dict[str, list[str]] = {}

    def resolve(name: str, chain: tuple[str, ...]) -> list[str]:
        if name in resolved:
            return resolved[name]
        if name in chain:
            cycle = " -> ".join((*chain, name))
            raise ConfigurationError(
                f"Circular role inheritance: {cycle}", config_key="rbac.roles"
            )

        role = roles[name]
        permissions = list(role.permissions)
        parent = role.inherits_from
        if parent:
            if parent not in roles:
                raise ConfigurationError(
                    f"Role '{name}' inherits from unknown role '{parent}'",
                    config_key=f"rbac.roles.{name}.inherits_from",
                )
            for permission in resolve(parent, (*chain, name)):
                if permission not in permissions:
                    permissions.append(permission)

        resolved[name] = permissions
        return permissions

    return {
        name: role.model_copy(update={"permissions": resolve(name, ())})
        for name, role in roles.items()
    }


def with_flattened_roles(policies: SecurityPolicies) -> SecurityPolicies:
    """역할 권한이 평탄화된 정책 사본 반환"""
    flattened = flatten_role_inheritance(policies.rbac.roles)
    return policies.model_copy(
        update={"rbac": policies.rbac.model_copy(update={"roles": flattened})}
    )


# ============================================
# 파일 기반 Provider
# ============================================


class SecurityPolicyProvider:
    """
    YAML 파일 기반 보안 정책 Provider

    사용 예시:
        provider = SecurityPolicyProvider("config/security_policies.yaml", "production")
        provider.load()

        policies = provider.get_security_policies()
        roles = policies.rbac.roles

        # 정책 파일 수정 후
        provider.reload()
        engine.clear_cache()
    """

    def __init__(
        self,
        path: str | Path,
        environment: str = "development",
        env_prefix: str = DEFAULT_ENV_PREFIX,
        environ: Mapping[str, str] | None = None,
        env_file: str | Path | None = None,
    ):
        self._path = Path(path)
        self._environment = environment
        self._env_prefix = env_prefix
        self._environ = environ
        self._env_file = env_file
        self._policies: SecurityPolicies | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_loaded(self) -> bool:
        return self._policies is not None

    def get_security_policies(self) -> SecurityPolicies:
        """현재 정책 스냅샷 반환 (미로드 상태면 먼저 로드)"""
        policies = self._policies
        if policies is None:
            return self.load()
        return policies

    def load(self) -> SecurityPolicies:
        """
        정책 파일 로드 및 스냅샷 교체

        Raises:
            ConfigurationError: 파일 누락, YAML 형식 오류, 검증 실패
        """
        with self._lock:
            policies = self._build_policies()
            self._policies = policies

        logger.info(
            f"Security policies loaded: version={policies.version}, "
            f"roles={len(policies.rbac.roles)}, env={self._environment}"
        )
        return policies

    def reload(self) -> SecurityPolicies:
        """정책 재로드 (실패 시 기존 스냅샷 유지 후 예외 전파)"""
        try:
            return self.load()
        except ConfigurationError as e:
            if self._policies is not None:
                logger.error(
                    f"Security policy reload failed, keeping previous policies: {e.message}"
                )
            raise

    def _read_document(self) -> dict[str, Any]:
        if not self._path.exists():
            raise ConfigurationError(
                f"Security policy file not found: {self._path}",
                config_key="security_policies_path",
            )

        try:
            with open(self._path, encoding="utf-8") as f:
                content = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in security policy file {self._path}: {e}",
                config_key="security_policies_path",
            ) from e

        if not isinstance(content, dict):
            raise ConfigurationError(
                f"Security policy document must be a mapping: {self._path}",
                config_key="security_policies_path",
            )
        return content

    def _build_policies(self) -> SecurityPolicies:
        document = self._read_document()

        environments = document.pop(ENVIRONMENTS_KEY, None) or {}
        if not isinstance(environments, dict):
            raise ConfigurationError(
                "'environments' section must be a mapping", config_key=ENVIRONMENTS_KEY
            )
        env_override = environments.get(self._environment)
        if env_override:
            document = deep_merge(document, env_override)
            logger.debug(f"Applied '{self._environment}' security policy overrides")

        # .env는 load/reload마다 다시 읽음
        document = apply_environment_overrides(
            document,
            prefix=self._env_prefix,
            environ=load_override_environ(self._env_file, self._environ),
        )

        try:
            policies = SecurityPolicies.model_validate(document)
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid security policy document {self._path}: {e}",
                config_key="rbac",
            ) from e

        return with_flattened_roles(policies)
