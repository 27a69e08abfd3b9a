"""URL → PDF 변환 API 라우터.

단일/다중 URL 변환과 변환 결과 조회 엔드포인트를 제공합니다.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, Response, status
from pydantic import ValidationError

from pdfpages.core.config.settings import settings
from pdfpages.core.models.api import (
    ConversionResponseDTO,
    ConvertUrlRequestDTO,
    ConvertUrlsRequestDTO,
    RendererListResponseDTO,
)
from pdfpages.infrastructure.renderer import available_renderers
from pdfpages.services.conversion_service import (
    ConversionFailedError,
    ConversionService,
    InvalidInputError,
)

router = APIRouter(prefix="/conversions", tags=["conversions"])

logger = logging.getLogger(__name__)


# =============================================================================
# 의존성
# =============================================================================


def get_conversion_service() -> ConversionService:
    """ConversionService 인스턴스를 생성합니다."""
    return ConversionService()


def validate_internal_api_key(
    x_internal_api_key: str = Header(..., description="내부 서비스 API 키"),
) -> None:
    """내부 API 키를 검증합니다.

    Raises:
        HTTPException: 인증 실패 시
    """
    if x_internal_api_key != settings.internal_api_secret:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="유효하지 않은 내부 API 키입니다",
        )


def _require_enabled(service: ConversionService) -> None:
    if not service.is_enabled():
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"렌더러를 사용할 수 없습니다: {service.renderer.name}",
        )


# =============================================================================
# 엔드포인트
# =============================================================================


@router.post(
    "",
    response_model=ConversionResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="URL PDF 변환",
    description="대상 URL을 헤드리스 브라우저로 렌더링하여 PDF로 저장합니다",
    dependencies=[Depends(validate_internal_api_key)],
)
async def convert_url(
    request: ConvertUrlRequestDTO,
    x_user_id: str = Header(..., description="변환을 요청한 사용자 ID"),
    service: ConversionService = Depends(get_conversion_service),
) -> ConversionResponseDTO:
    """단일 URL을 PDF로 변환합니다."""
    _require_enabled(service)

    try:
        conversion_request = request.to_domain()
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    try:
        document = await service.convert_url(conversion_request, user_id=x_user_id)
    except ConversionFailedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return ConversionResponseDTO.from_domain(document)


@router.post(
    "/batch",
    response_model=ConversionResponseDTO,
    status_code=status.HTTP_201_CREATED,
    summary="여러 URL 병합 PDF 변환",
    description="여러 URL을 순서대로 PDF로 변환한 뒤 하나의 PDF로 병합합니다",
    dependencies=[Depends(validate_internal_api_key)],
)
async def convert_urls(
    request: ConvertUrlsRequestDTO,
    x_user_id: str = Header(..., description="변환을 요청한 사용자 ID"),
    service: ConversionService = Depends(get_conversion_service),
) -> ConversionResponseDTO:
    """여러 URL을 하나의 PDF로 변환합니다."""
    _require_enabled(service)

    try:
        conversion_requests = [item.to_domain() for item in request.requests]
        document = await service.convert_urls(
            conversion_requests,
            user_id=x_user_id,
            output_filename=request.output_filename,
            stamp_page_numbers=request.stamp_page_numbers,
            keep_session=request.keep_session,
        )
    except (ValidationError, InvalidInputError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except ConversionFailedError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e

    return ConversionResponseDTO.from_domain(document)


@router.get(
    "/renderers",
    response_model=RendererListResponseDTO,
    summary="렌더러 목록",
    description="설정된 렌더러와 사용 가능한 렌더러 목록을 반환합니다",
    dependencies=[Depends(validate_internal_api_key)],
)
async def list_renderers() -> RendererListResponseDTO:
    """사용 가능한 렌더러를 조회합니다."""
    return RendererListResponseDTO(
        selected=settings.renderer,
        available=available_renderers(settings),
    )


@router.get(
    "/{filename}",
    response_class=Response,
    summary="변환 PDF 조회",
    description="이전에 변환된 PDF 파일을 반환합니다",
    dependencies=[Depends(validate_internal_api_key)],
)
async def get_converted_pdf(
    filename: str,
    service: ConversionService = Depends(get_conversion_service),
) -> Response:
    """저장된 PDF를 반환합니다."""
    try:
        stored = service.get_converted_pdf(filename)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    if stored is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"변환된 PDF를 찾을 수 없습니다: {filename}",
        )

    return Response(
        content=stored.read_bytes(),
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{stored.logical_name}"'},
    )
