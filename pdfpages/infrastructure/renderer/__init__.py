"""페이지 렌더러 인프라스트럭처.

Playwright(Chromium)를 사용하여 웹 페이지를 PDF로 렌더링합니다.
"""

from pdfpages.infrastructure.renderer.base import PageRenderer, filter_options
from pdfpages.infrastructure.renderer.chromium import ChromiumRenderer
from pdfpages.infrastructure.renderer.null import NullRenderer
from pdfpages.infrastructure.renderer.readiness import ReadinessTimeoutError, ReadinessWaiter
from pdfpages.infrastructure.renderer.registry import available_renderers, build_renderer

__all__ = [
    "ChromiumRenderer",
    "NullRenderer",
    "PageRenderer",
    "ReadinessTimeoutError",
    "ReadinessWaiter",
    "available_renderers",
    "build_renderer",
    "filter_options",
]
