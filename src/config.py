"""
애플리케이션 설정 모듈

Pydantic Settings를 활용한 환경변수 기반 설정 관리
- 타입 검증 자동화
- .env 파일 지원
- 환경별 설정 분리

역할/권한 정책 자체는 YAML 문서(security_policies_path)로 관리합니다.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# 프로젝트 루트 디렉토리 (src/config.py 기준으로 한 단계 상위)
PROJECT_ROOT = Path(__file__).parent.parent
ENV_FILE_PATH = PROJECT_ROOT / ".env"
DEFAULT_SECURITY_POLICIES_PATH = PROJECT_ROOT / "config" / "security_policies.yaml"


class Settings(BaseSettings):
    """
    애플리케이션 전역 설정

    환경변수 또는 .env 파일에서 값을 로드합니다.
    """

    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE_PATH),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    # ============================================
    # 애플리케이션 설정
    # ============================================
    app_name: str = Field(default="ThreadCraft RBAC API", description="애플리케이션 이름")
    app_version: str = Field(default="0.1.0", description="애플리케이션 버전")
    debug: bool = Field(default=False, description="디버그 모드")
    environment: str = Field(default="development", description="실행 환경")
    cors_origins: list[str] = Field(
        default=[
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="CORS 허용 오리진 목록",
    )

    # ============================================
    # 보안 정책 설정
    # ============================================
    security_policies_path: str = Field(
        default=str(DEFAULT_SECURITY_POLICIES_PATH),
        description="역할/권한 정책 YAML 파일 경로",
    )
    security_policy_env_prefix: str = Field(
        default="SECURITY_POLICY__",
        min_length=1,
        description="정책 값을 덮어쓰는 환경변수 접두사",
    )
    permission_cache_ttl_seconds: int = Field(
        default=300,
        ge=1,
        le=3600,
        description="권한 판정 캐시 TTL (초)",
    )

    # ============================================
    # Authentication 설정
    # ============================================
    auth_enabled: bool = Field(
        default=True,
        description="인증 활성화 여부 (False면 AnonymousAdmin 또는 X-Demo-Role 사용)",
    )

    # ============================================
    # 로깅 설정
    # ============================================
    log_level: str = Field(
        default="INFO",
        description="로깅 레벨",
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="로그 포맷",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """로그 레벨 유효성 검사"""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper_v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """환경 유효성 검사"""
        valid_envs = {"development", "staging", "production", "test"}
        lower_v = v.lower()
        if lower_v not in valid_envs:
            raise ValueError(f"environment must be one of {valid_envs}")
        return lower_v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """CORS 오리진 목록 검증"""
        if "*" in v and len(v) > 1:
            raise ValueError(
                "CORS origins cannot mix wildcard '*' with specific origins. "
                "Use either '*' alone or specific origin URLs."
            )
        return v

    @property
    def is_production(self) -> bool:
        """프로덕션 환경 여부"""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """개발 환경 여부"""
        return self.environment == "development"

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """프로덕션 환경 설정 검증"""
        if self.environment == "production":
            if not self.auth_enabled:
                logger.warning(
                    "AUTH_ENABLED is false in production. "
                    "Every request will run as the anonymous admin."
                )
            if self.debug:
                raise ValueError("debug must be disabled in production")

        return self


@lru_cache
def get_settings() -> Settings:
    """설정 싱글톤 인스턴스 반환"""
    return Settings()
