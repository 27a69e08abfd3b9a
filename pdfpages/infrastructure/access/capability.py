"""사용자 권한 확인."""

from collections.abc import Iterable
from typing import Protocol

GENERATE_PDF = "pdfpages:generatepdf"


class CapabilityProvider(Protocol):
    """사용자 권한 조회 인터페이스."""

    def has_capability(self, user_id: str, capability: str) -> bool: ...


class StaticCapabilityProvider:
    """설정에 나열된 사용자에게 PDF 생성 권한을 부여합니다.

    "*"가 포함되어 있으면 모든 사용자에게 허용합니다.
    """

    def __init__(self, allowed_users: Iterable[str]) -> None:
        self.allowed_users = frozenset(allowed_users)

    def has_capability(self, user_id: str, capability: str) -> bool:
        if capability != GENERATE_PDF:
            return False
        return "*" in self.allowed_users or user_id in self.allowed_users
