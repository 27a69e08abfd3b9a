"""아무 것도 렌더링하지 않는 렌더러."""

import logging
from collections.abc import Mapping
from typing import Any

from pdfpages.domain.conversion.models import CookieSpec
from pdfpages.infrastructure.renderer.base import filter_options

logger = logging.getLogger(__name__)


class NullRenderer:
    """빈 PDF 내용을 반환하는 렌더러.

    브라우저가 없는 환경에서 변환 흐름을 점검할 때 사용합니다.
    """

    name = "null"
    VALID_OPTIONS: frozenset[str] = frozenset()

    def is_enabled(self) -> bool:
        return True

    def validate_options(self, options: Mapping[str, Any]) -> dict[str, Any]:
        return filter_options(options, self.VALID_OPTIONS)

    async def generate(
        self,
        proxy_url: str,
        filename: str = "",
        options: Mapping[str, Any] | None = None,
        cookie: CookieSpec | None = None,
        window_size: tuple[int, int] | None = None,
        user_agent: str | None = None,
        js_condition: str | None = None,
        js_condition_params: list[Any] | None = None,
    ) -> bytes:
        logger.debug("[NULL_RENDERER] 렌더링 생략", extra={"renderer_filename": filename})
        return b""
