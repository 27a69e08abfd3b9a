"""Chromium 기반 URL → PDF 렌더러.

Playwright를 사용하여 헤드리스 Chromium으로 프록시 URL을 열고
대상 페이지를 PDF로 출력합니다.
"""

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any, Final
from urllib.parse import parse_qs, urlparse

from pdfpages.core.config.settings import ConfigurationError, Settings
from pdfpages.domain.conversion.models import CookieSpec
from pdfpages.infrastructure.renderer.base import filter_options, pdf_options
from pdfpages.infrastructure.renderer.readiness import ReadinessWaiter

logger = logging.getLogger(__name__)


# 옵션 이름 → Playwright page.pdf() 키워드 인자
_PDF_KEYWORDS: Final[dict[str, str]] = {
    "landscape": "landscape",
    "printBackground": "print_background",
    "displayHeaderFooter": "display_header_footer",
    "headerTemplate": "header_template",
    "footerTemplate": "footer_template",
    "preferCSSPageSize": "prefer_css_page_size",
    "scale": "scale",
}

# 인치 단위 옵션 → margin 딕셔너리 키
_MARGIN_KEYS: Final[dict[str, str]] = {
    "marginTop": "top",
    "marginBottom": "bottom",
    "marginLeft": "left",
    "marginRight": "right",
}


class ChromiumRenderer:
    """헤드리스 Chromium 렌더러.

    호출마다 독립된 브라우저 프로세스를 띄우고, 어떤 경로로 끝나든
    브라우저를 닫습니다.

    사용법:
        renderer = ChromiumRenderer(settings)
        pdf_bytes = await renderer.generate(proxy_url, "page.pdf", {"landscape": True})
    """

    name = "chromium"

    # 허용 옵션 (키 → 설명)
    VALID_OPTIONS: Final[dict[str, str]] = {
        "landscape": "(bool) 가로 방향 출력",
        "printBackground": "(bool) 배경색과 배경 이미지 출력",
        "displayHeaderFooter": "(bool) 머리글/바닥글 표시",
        "headerTemplate": "(str) 머리글 HTML 템플릿",
        "footerTemplate": "(str) 바닥글 HTML 템플릿",
        "paperWidth": "(float) 용지 너비 (인치)",
        "paperHeight": "(float) 용지 높이 (인치)",
        "marginTop": "(float) 위쪽 여백 (인치)",
        "marginBottom": "(float) 아래쪽 여백 (인치)",
        "marginLeft": "(float) 왼쪽 여백 (인치)",
        "marginRight": "(float) 오른쪽 여백 (인치)",
        "preferCSSPageSize": "(bool) @page 규칙의 용지 크기 우선",
        "scale": "(float) 페이지 배율",
        "windowSize": "(list) 브라우저 창 크기, 예: [1920, 1080]",
        "userAgent": "(str) 페이지 탐색 시 사용할 User-Agent",
        "jsCondition": "(str) 준비 여부를 boolean으로 반환하는 JavaScript 함수",
        "jsConditionParams": "(list) JavaScript 함수에 전달할 인자 목록",
    }

    # 쿠키 유효 기간 (초)
    COOKIE_LIFETIME: Final[int] = 7 * 24 * 60 * 60

    BROWSER_ARGS: Final[list[str]] = [
        "--no-sandbox",
        "--disable-dev-shm-usage",
        "--disable-gpu",
    ]

    def __init__(
        self,
        config: Settings,
        playwright_factory: Callable[[], Any] | None = None,
        waiter_factory: Callable[[int], ReadinessWaiter] = ReadinessWaiter,
    ) -> None:
        """초기화.

        Args:
            config: 애플리케이션 설정
            playwright_factory: async_playwright 대체 함수 (테스트 주입용)
            waiter_factory: 타임아웃(ms)을 받아 ReadinessWaiter를 만드는 함수
        """
        self.config = config
        self.response_timeout: int = config.chromium_response_timeout
        self._playwright_factory = playwright_factory
        self._waiter_factory = waiter_factory

    def is_enabled(self) -> bool:
        """Chromium 경로 설정이 있으면 사용 가능합니다."""
        try:
            self.config.get_config(f"{self.name}_path")
            return True
        except ConfigurationError:
            return False

    def validate_options(self, options: Mapping[str, Any]) -> dict[str, Any]:
        """허용 목록에 없는 옵션을 제거합니다."""
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
        """프록시 URL을 열어 대상 페이지의 PDF를 생성합니다.

        Args:
            proxy_url: 접근 키 로그인 후 대상 URL로 리다이렉트하는 프록시 URL
            filename: 생성할 파일명 (로깅용)
            options: 렌더러 옵션 (허용 목록으로 다시 걸러짐)
            cookie: 대상 도메인에 설치할 쿠키
            window_size: 브라우저 창 크기
            user_agent: 사용자 정의 User-Agent
            js_condition: 준비 여부를 반환하는 JavaScript 함수
            js_condition_params: JavaScript 함수 인자 목록

        Returns:
            PDF 바이트 데이터

        Raises:
            ReadinessTimeoutError: 준비 조건 대기 시간 초과 시
            ConfigurationError: Chromium 경로가 설정되지 않은 경우
            ImportError: Playwright가 설치되지 않은 경우
        """
        options = self.validate_options(options or {})
        window_size = window_size or _as_window_size(options.get("windowSize"))
        user_agent = user_agent or options.get("userAgent") or None
        js_condition = js_condition or options.get("jsCondition") or None
        if js_condition_params is None:
            js_condition_params = list(options.get("jsConditionParams") or [])

        executable_path = self.config.get_config(f"{self.name}_path")
        timeout_ms = self.response_timeout * 1000
        async_playwright = self._resolve_playwright()

        logger.info(
            "[CHROMIUM] PDF 렌더링 시작",
            extra={"proxy_url": _redact_key(proxy_url), "output_file": filename},
        )

        launch_args = list(self.BROWSER_ARGS)
        if window_size:
            launch_args.append(f"--window-size={window_size[0]},{window_size[1]}")

        try:
            async with async_playwright() as p:
                browser = await p.chromium.launch(
                    executable_path=executable_path,
                    headless=True,
                    args=launch_args,
                )
                try:
                    context_options: dict[str, Any] = {}
                    if window_size:
                        context_options["viewport"] = {
                            "width": window_size[0],
                            "height": window_size[1],
                        }
                    if user_agent:
                        context_options["user_agent"] = user_agent

                    context = await browser.new_context(**context_options)

                    # 1. 쿠키 설치 (탐색 전에 완료)
                    if cookie is not None:
                        await context.add_cookies([self._build_cookie(cookie, proxy_url)])

                    page = await context.new_page()

                    # 2. 프록시 URL 탐색 (접근 키 로그인 → 대상 URL 리다이렉트)
                    await page.goto(proxy_url, wait_until="load", timeout=timeout_ms)

                    # 3. 준비 조건 대기
                    evaluate = None
                    if js_condition:
                        expression = f"(params) => ({js_condition})(...params)"
                        params = list(js_condition_params)

                        async def evaluate() -> Any:
                            return await page.evaluate(expression, params)

                    await self._waiter_factory(timeout_ms).wait(evaluate)

                    # 4. PDF 출력
                    pdf_bytes = await asyncio.wait_for(
                        page.pdf(**self._build_pdf_kwargs(options)),
                        timeout=self.response_timeout,
                    )
                finally:
                    # 브라우저 프로세스가 남지 않도록 항상 종료
                    await browser.close()

        except Exception as e:
            logger.error(
                "[CHROMIUM] PDF 렌더링 실패",
                extra={"output_file": filename, "error": str(e), "error_type": type(e).__name__},
            )
            raise

        logger.info(
            "[CHROMIUM] PDF 렌더링 완료",
            extra={"output_file": filename, "pdf_size": len(pdf_bytes)},
        )
        return pdf_bytes

    def _resolve_playwright(self) -> Callable[[], Any]:
        if self._playwright_factory is not None:
            return self._playwright_factory

        try:
            from playwright.async_api import async_playwright
        except ImportError as e:
            logger.error("Playwright가 설치되지 않음: %s", str(e))
            raise ImportError(
                "Playwright가 필요합니다. 'pip install playwright && playwright install chromium' 실행"
            ) from e
        return async_playwright

    def _build_cookie(self, cookie: CookieSpec, proxy_url: str) -> dict[str, Any]:
        """프록시 URL에 담긴 대상 URL의 도메인으로 쿠키를 만듭니다."""
        target_url = parse_qs(urlparse(proxy_url).query).get("url", [proxy_url])[0]
        domain = urlparse(target_url).hostname or urlparse(proxy_url).hostname or ""
        return {
            "name": cookie.name,
            "value": cookie.value,
            "domain": domain,
            "path": "/",
            "expires": time.time() + self.COOKIE_LIFETIME,
        }

    @staticmethod
    def _build_pdf_kwargs(options: Mapping[str, Any]) -> dict[str, Any]:
        """옵션을 Playwright page.pdf() 인자로 변환합니다."""
        kwargs: dict[str, Any] = {}
        margin: dict[str, str] = {}

        for key, value in pdf_options(options).items():
            if key in _PDF_KEYWORDS:
                kwargs[_PDF_KEYWORDS[key]] = value
            elif key in _MARGIN_KEYS:
                margin[_MARGIN_KEYS[key]] = f"{value}in"
            elif key == "paperWidth":
                kwargs["width"] = f"{value}in"
            elif key == "paperHeight":
                kwargs["height"] = f"{value}in"

        if margin:
            kwargs["margin"] = margin
        return kwargs


def _as_window_size(value: Any) -> tuple[int, int] | None:
    if not value or len(value) != 2:
        return None
    return int(value[0]), int(value[1])


def _redact_key(proxy_url: str) -> str:
    """로그에 남기지 않도록 접근 키를 가립니다."""
    parsed = urlparse(proxy_url)
    query = parse_qs(parsed.query)
    if "key" not in query:
        return proxy_url
    return proxy_url.replace(query["key"][0], "***")
