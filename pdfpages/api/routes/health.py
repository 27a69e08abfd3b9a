"""헬스 체크 API 라우터."""

from fastapi import APIRouter

from pdfpages.core.config.settings import settings
from pdfpages.core.models.api import HealthCheckResponse
from pdfpages.infrastructure.renderer import build_renderer

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "",
    response_model=HealthCheckResponse,
    summary="헬스 체크",
    description="서비스 상태와 설정된 렌더러 사용 가능 여부를 확인합니다.",
)
async def health_check() -> HealthCheckResponse:
    """헬스 체크 엔드포인트.

    렌더러를 사용할 수 없어도 프록시 엔드포인트는 동작하므로
    상태는 "degraded"로만 표시합니다.
    """
    renderer = build_renderer(settings)
    enabled = renderer.is_enabled()

    return HealthCheckResponse(
        status="healthy" if enabled else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        renderer=renderer.name,
        renderer_enabled=enabled,
    )
