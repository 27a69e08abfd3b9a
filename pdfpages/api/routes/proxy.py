"""변환 프록시 API 라우터.

헤드리스 브라우저가 가장 먼저 접근하는 엔드포인트입니다. 접근 키로
로그인한 뒤 대상 URL로 리다이렉트합니다. 사용자에게 대상 페이지 권한이
없으면 변환된 PDF는 대상 사이트의 오류 페이지가 됩니다.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from pdfpages.core.config.settings import settings
from pdfpages.infrastructure import access
from pdfpages.infrastructure.access import (
    GENERATE_PDF,
    AccessKeyManager,
    CapabilityProvider,
    InstanceMismatchError,
    InvalidTokenError,
)

router = APIRouter(tags=["proxy"])

logger = logging.getLogger(__name__)


# =============================================================================
# 의존성
# =============================================================================


def get_key_manager() -> AccessKeyManager:
    """프로세스 전역 접근 키 관리자."""
    return access.key_manager


def get_capability_provider() -> CapabilityProvider:
    """프로세스 전역 권한 조회기."""
    return access.capability_provider


# =============================================================================
# 엔드포인트
# =============================================================================


@router.get(
    "/convert-proxy",
    status_code=status.HTTP_302_FOUND,
    response_class=RedirectResponse,
    summary="변환 프록시",
    description="접근 키로 로그인한 뒤 대상 URL로 리다이렉트합니다",
)
async def convert_proxy(
    url: str = Query(..., description="대상 URL"),
    key: str = Query(..., pattern=r"^[A-Za-z0-9]+$", description="접근 키"),
    instance: int = Query(..., description="렌더러 인스턴스 ID"),
    key_manager: AccessKeyManager = Depends(get_key_manager),
    capability_provider: CapabilityProvider = Depends(get_capability_provider),
) -> RedirectResponse:
    """접근 키를 사용하고 대상 URL로 리다이렉트합니다.

    Raises:
        HTTPException: 401 - 키가 유효하지 않거나 만료됨, 403 - PDF 생성 권한 없음
    """
    try:
        redeemed = key_manager.redeem(key, instance)
    except (InvalidTokenError, InstanceMismatchError) as e:
        logger.warning(
            "[PROXY] 접근 키 로그인 실패",
            extra={"instance": instance, "error": str(e), "error_type": type(e).__name__},
        )
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e)) from e

    if redeemed.target_url != url:
        key_manager.session_manager.terminate(redeemed.session_id)
        logger.warning("[PROXY] 접근 키의 대상 URL과 요청 URL이 다름", extra={"url": url})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="접근 키가 요청한 URL용이 아닙니다",
        )

    if not capability_provider.has_capability(redeemed.user_id, GENERATE_PDF):
        key_manager.session_manager.terminate(redeemed.session_id)
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="PDF 생성 권한이 없습니다",
        )

    logger.info(
        "[PROXY] 대상 URL로 리다이렉트",
        extra={"user_id": redeemed.user_id, "url": url},
    )
    response = RedirectResponse(url, status_code=status.HTTP_302_FOUND)
    response.set_cookie(
        settings.session_cookie_name,
        redeemed.session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        samesite="lax",
    )
    return response
