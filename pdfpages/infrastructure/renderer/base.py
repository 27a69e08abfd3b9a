"""렌더러 인터페이스와 공통 옵션 처리."""

from collections.abc import Iterable, Mapping
from typing import Any, Protocol, runtime_checkable

from pdfpages.domain.conversion.models import CookieSpec

# 렌더링 컨텍스트용 옵션 (PDF 출력 호출에는 전달하지 않음)
RENDER_CONTEXT_OPTIONS: frozenset[str] = frozenset(
    {"windowSize", "userAgent", "jsCondition", "jsConditionParams"}
)


@runtime_checkable
class PageRenderer(Protocol):
    """URL을 PDF로 렌더링하는 렌더러.

    구현체는 name 속성과 아래 세 메서드를 제공해야 합니다.
    """

    name: str

    def is_enabled(self) -> bool: ...

    def validate_options(self, options: Mapping[str, Any]) -> dict[str, Any]: ...

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
    ) -> bytes: ...


def filter_options(options: Mapping[str, Any], allowed: Iterable[str]) -> dict[str, Any]:
    """허용 목록에 있는 옵션만 남깁니다. 나머지는 조용히 버립니다."""
    allowed_keys = set(allowed)
    return {key: value for key, value in options.items() if key in allowed_keys}


def pdf_options(options: Mapping[str, Any]) -> dict[str, Any]:
    """렌더링 컨텍스트 옵션을 제외한 PDF 출력 옵션을 반환합니다."""
    return {key: value for key, value in options.items() if key not in RENDER_CONTEXT_OPTIONS}
