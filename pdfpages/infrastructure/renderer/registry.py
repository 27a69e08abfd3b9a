"""설정에 따른 렌더러 선택."""

import logging
from collections.abc import Callable

from pdfpages.core.config.settings import ConfigurationError, Settings
from pdfpages.infrastructure.renderer.base import PageRenderer
from pdfpages.infrastructure.renderer.chromium import ChromiumRenderer
from pdfpages.infrastructure.renderer.null import NullRenderer

logger = logging.getLogger(__name__)

# 렌더러 이름 → 생성 함수
RENDERERS: dict[str, Callable[[Settings], PageRenderer]] = {
    NullRenderer.name: lambda config: NullRenderer(),
    ChromiumRenderer.name: lambda config: ChromiumRenderer(config),
}


def build_renderer(config: Settings, name: str | None = None) -> PageRenderer:
    """이름에 해당하는 렌더러를 생성합니다.

    Args:
        config: 애플리케이션 설정
        name: 렌더러 이름 (기본값: config.renderer)

    Returns:
        렌더러 인스턴스

    Raises:
        ConfigurationError: 알 수 없는 렌더러 이름인 경우
    """
    renderer_name = name or config.renderer
    factory = RENDERERS.get(renderer_name)
    if factory is None:
        raise ConfigurationError(f"알 수 없는 렌더러입니다: {renderer_name}")
    return factory(config)


def available_renderers(config: Settings) -> list[str]:
    """사용 가능한 렌더러 이름 목록을 반환합니다."""
    enabled = [name for name in RENDERERS if build_renderer(config, name).is_enabled()]
    logger.debug("[RENDERER] 사용 가능한 렌더러", extra={"renderers": enabled})
    return enabled
