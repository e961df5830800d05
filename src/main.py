"""
ThreadCraft RBAC API

FastAPI 애플리케이션 진입점
역할 기반 권한 판정 엔진을 요청 처리 계층에 제공합니다.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.api import permissions_router
from src.auth.ownership import OwnershipChecker
from src.auth.permission_cache import PermissionCache
from src.auth.policy_provider import SecurityPolicyProvider
from src.auth.rbac_engine import RBACEngine
from src.config import ENV_FILE_PATH, get_settings
from src.domain.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ThreadCraftError,
)
from src.repositories.resource_repository import InMemoryResourceRepository

# 로깅 설정
settings = get_settings()
logging.basicConfig(
    level=getattr(logging, settings.log_level),
    format=settings.log_format,
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    애플리케이션 라이프사이클 관리

    시작 시: 보안 정책 로드, RBAC 엔진 초기화
    종료 시: 캐시 정리
    """
    logger.info("Starting ThreadCraft RBAC API...")

    # 보안 정책 로드 (실패 시 기동 중단)
    policy_provider = SecurityPolicyProvider(
        path=settings.security_policies_path,
        environment=settings.environment,
        env_prefix=settings.security_policy_env_prefix,
        env_file=ENV_FILE_PATH,
    )
    try:
        policy_provider.load()
    except ConfigurationError as e:
        logger.error(f"Failed to load security policies: {e.message}")
        raise RuntimeError(
            "Security policies are required for RBAC engine initialization"
        ) from e

    # 소유권 확인용 리소스 저장소
    resource_repository = InMemoryResourceRepository()
    ownership_checker = OwnershipChecker(policy_provider, resource_repository)

    # RBAC 엔진 초기화
    rbac_engine = RBACEngine(
        policy_provider=policy_provider,
        ownership_checker=ownership_checker,
        cache=PermissionCache(ttl_seconds=settings.permission_cache_ttl_seconds),
    )
    logger.info(
        f"RBACEngine initialized (cache_ttl={settings.permission_cache_ttl_seconds}s, "
        f"auth_enabled={settings.auth_enabled})"
    )

    # app.state에 저장
    app.state.policy_provider = policy_provider
    app.state.resource_repository = resource_repository
    app.state.rbac_engine = rbac_engine

    yield

    logger.info("Shutting down ThreadCraft RBAC API...")
    rbac_engine.clear_cache()


# FastAPI 앱 생성
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="ThreadCraft 주문 관리 시스템의 역할 기반 권한 판정 API",
    lifespan=lifespan,
)

# CORS 설정
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "X-Request-ID",
        "X-User-Id",
        "X-User-Role",
        "X-Demo-Role",
    ],
)


# ============================================
# 글로벌 예외 핸들러
# ============================================


@app.exception_handler(AuthenticationError)
async def authentication_error_handler(
    request: Request, exc: AuthenticationError
) -> JSONResponse:
    """인증 실패 시 401 응답"""
    return JSONResponse(
        status_code=401,
        content={"detail": {"message": exc.message, "code": exc.code}},
    )


@app.exception_handler(AuthorizationError)
async def authorization_error_handler(
    request: Request, exc: AuthorizationError
) -> JSONResponse:
    """인가 실패 시 403 응답 (거부 사유 + 충족 가능한 역할)"""
    return JSONResponse(
        status_code=403,
        content={
            "detail": {
                "message": exc.message,
                "code": exc.code,
                "required_role": exc.required_role,
            }
        },
    )


@app.exception_handler(ThreadCraftError)
async def threadcraft_error_handler(
    request: Request, exc: ThreadCraftError
) -> JSONResponse:
    """기타 도메인 예외 시 500 응답"""
    settings = get_settings()
    if settings.is_production:
        logger.error(f"ThreadCraftError: {exc.code}")
    else:
        logger.error(f"ThreadCraftError: {exc.message}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": {"message": exc.message, "code": exc.code}},
    )


# 라우터 등록
app.include_router(permissions_router)


@app.get("/")
async def root():
    """루트 엔드포인트"""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
    )
