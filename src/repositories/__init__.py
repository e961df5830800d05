"""
Repositories Package

데이터 접근 계층을 제공합니다.
"""

from src.repositories.resource_repository import (
    InMemoryResourceRepository,
    ResourceRepository,
)

__all__ = [
    "ResourceRepository",
    "InMemoryResourceRepository",
]
