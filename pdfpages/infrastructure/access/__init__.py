"""접근 키 프록시 인프라스트럭처.

단일 사용 접근 키 발급/검증, 임시 세션, 권한 확인을 제공합니다.
"""

from pdfpages.core.config.settings import settings
from pdfpages.infrastructure.access.capability import (
    GENERATE_PDF,
    CapabilityProvider,
    StaticCapabilityProvider,
)
from pdfpages.infrastructure.access.key_manager import (
    AccessKeyManager,
    InstanceMismatchError,
    InvalidTokenError,
)
from pdfpages.infrastructure.access.session import CurrentSession, SessionManager

# 프로세스 전역 저장소 (프록시 라우터와 변환 서비스가 공유)
session_manager = SessionManager(ttl_seconds=settings.session_ttl_seconds)
key_manager = AccessKeyManager(
    session_manager,
    ttl_seconds=settings.access_key_ttl_seconds,
    instance_id=settings.instance_id,
)
capability_provider = StaticCapabilityProvider(settings.generate_pdf_users)

__all__ = [
    "GENERATE_PDF",
    "AccessKeyManager",
    "CapabilityProvider",
    "CurrentSession",
    "InstanceMismatchError",
    "InvalidTokenError",
    "SessionManager",
    "StaticCapabilityProvider",
    "capability_provider",
    "key_manager",
    "session_manager",
]
