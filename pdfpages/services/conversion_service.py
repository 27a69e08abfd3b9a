"""URL → PDF 변환 서비스.

접근 키 발급, 렌더링, 여러 PDF 병합, 저장소 저장, 세션 종료를 조율합니다.
"""

import hashlib
import logging
import os
import tempfile
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from urllib.parse import urlencode

from pdfpages.core.config.settings import Settings, settings
from pdfpages.domain.conversion.models import ConversionRequest, RenderedDocument
from pdfpages.infrastructure import access
from pdfpages.infrastructure.access import AccessKeyManager, CurrentSession
from pdfpages.infrastructure.pdf import PDFMerger
from pdfpages.infrastructure.renderer import PageRenderer, build_renderer
from pdfpages.infrastructure.storage import LocalFileStorage, StoredFile

logger = logging.getLogger(__name__)


def _format_bytes(size: int) -> str:
    """바이트 크기를 읽기 쉬운 형식으로 변환."""
    for unit in ["B", "KB", "MB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} GB"


def _format_duration(seconds: float) -> str:
    """소요 시간을 읽기 쉬운 형식으로 변환."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    return f"{seconds:.2f}s"


def default_filename(*urls: str) -> str:
    """URL로부터 저장 파일명을 만듭니다."""
    digest = hashlib.sha1("\n".join(urls).encode("utf-8")).hexdigest()
    return f"{digest}.pdf"


class InvalidInputError(Exception):
    """잘못된 변환 요청 (부수 효과 전에 거부됨)."""

    pass


class ConversionFailedError(Exception):
    """변환 실패. 원인 예외는 __cause__로 전달됩니다."""

    pass


class ConversionService:
    """URL → PDF 변환 서비스.

    렌더러가 프록시 URL로 접근하면 접근 키로 로그인한 뒤 대상 URL로
    리다이렉트되고, 그 페이지가 PDF로 출력됩니다. keep_session이 아니면
    변환이 끝난 뒤 접근 키로 만들어진 세션을 항상 종료합니다.

    사용법:
        service = ConversionService()
        document = await service.convert_url(ConversionRequest(url=url), user_id="42")
    """

    def __init__(
        self,
        config: Settings = settings,
        renderer: PageRenderer | None = None,
        key_manager: AccessKeyManager | None = None,
        storage: LocalFileStorage | None = None,
        pdf_merger: PDFMerger | None = None,
    ) -> None:
        """서비스 초기화.

        설정값은 여기서 한 번만 읽습니다.
        """
        self.renderer = renderer or build_renderer(config)
        self.key_manager = key_manager or access.key_manager
        self.storage = storage or LocalFileStorage(config.storage_dir)
        self.pdf_merger = pdf_merger or PDFMerger()
        self.proxy_endpoint = (
            f"{config.public_base_url.rstrip('/')}{config.api_v1_prefix}/convert-proxy"
        )

    def is_enabled(self) -> bool:
        """선택된 렌더러를 사용할 수 있는지 확인합니다."""
        return self.renderer.is_enabled()

    def get_proxy_url(self, url: str, key: str) -> str:
        """접근 키를 담은 프록시 URL을 만듭니다."""
        query = urlencode({"url": url, "key": key, "instance": self.key_manager.instance_id})
        return f"{self.proxy_endpoint}?{query}"

    async def convert_url(self, request: ConversionRequest, user_id: str) -> RenderedDocument:
        """단일 URL을 PDF로 변환하여 저장합니다.

        Args:
            request: 변환 요청
            user_id: 변환을 요청한 사용자 ID (접근 키가 이 사용자로 발급됨)

        Returns:
            저장된 PDF 문서

        Raises:
            ConversionFailedError: 변환 중 어떤 오류든 발생한 경우
        """
        total_start = time.time()
        session = CurrentSession(self.key_manager, self.key_manager.session_manager)
        filename = request.filename or default_filename(request.url)

        logger.info(
            "[CONVERSION] 단일 변환 시작",
            extra={"url": request.url, "output_file": filename, "renderer": self.renderer.name},
        )

        try:
            content = await self._render(request, user_id, filename, session)
            self.create_pdf_file(content, filename)

            logger.info(
                "[CONVERSION] 단일 변환 완료",
                extra={
                    "output_file": filename,
                    "pdf_size": _format_bytes(len(content)),
                    "duration": _format_duration(time.time() - total_start),
                },
            )
            return RenderedDocument(filename=filename, renderer=self.renderer.name, content=content)

        except Exception as e:
            logger.error(
                "[CONVERSION] 단일 변환 실패",
                extra={"url": request.url, "error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            raise ConversionFailedError(f"URL → PDF 변환을 완료할 수 없습니다: {e}") from e

        finally:
            if not request.keep_session:
                # 접근 키 세션이 다른 요청에 사용되지 않도록 종료
                session.terminate_current()

    async def convert_urls(
        self,
        requests: Sequence[ConversionRequest],
        user_id: str,
        output_filename: str | None = None,
        stamp_page_numbers: bool = False,
        keep_session: bool = False,
    ) -> RenderedDocument:
        """여러 URL을 순서대로 PDF로 변환한 뒤 하나로 병합하여 저장합니다.

        Args:
            requests: 변환 요청 목록 (순서 = 결과 페이지 순서)
            user_id: 변환을 요청한 사용자 ID
            output_filename: 병합 PDF 파일명 (기본값: URL 목록의 해시)
            stamp_page_numbers: 모든 페이지에 "Page X of Y" 바닥글 추가 여부
            keep_session: 변환 후 세션 유지 여부

        Returns:
            저장된 병합 PDF 문서

        Raises:
            InvalidInputError: 요청 목록이 비어있거나 잘못된 요소가 있는 경우
            ConversionFailedError: 변환 중 어떤 오류든 발생한 경우
        """
        if not requests:
            raise InvalidInputError("변환할 URL이 없습니다")
        if not all(isinstance(request, ConversionRequest) for request in requests):
            raise InvalidInputError("모든 요소는 ConversionRequest 인스턴스여야 합니다")

        total_start = time.time()
        session = CurrentSession(self.key_manager, self.key_manager.session_manager)
        filename = output_filename or default_filename(*(request.url for request in requests))
        temp_paths: list[Path] = []

        logger.info(
            "[CONVERSION] 다중 변환 시작",
            extra={
                "url_count": len(requests),
                "output_file": filename,
                "stamp_page_numbers": stamp_page_numbers,
            },
        )

        try:
            for idx, request in enumerate(requests):
                step_start = time.time()
                page_filename = request.filename or default_filename(request.url)
                content = await self._render(request, user_id, page_filename, session)

                # 저장소에는 임시 파일만 남기고 중간 산출물은 바로 삭제
                stored = self.create_pdf_file(content, page_filename)
                try:
                    temp_paths.append(stored.copy_to_temp())
                finally:
                    self.storage.delete(stored)

                logger.info(
                    f"[CONVERSION] URL #{idx + 1} 렌더링 완료",
                    extra={
                        "url": request.url,
                        "pdf_size": _format_bytes(len(content)),
                        "duration": _format_duration(time.time() - step_start),
                    },
                )

            merged_path = self._create_temp_path()
            temp_paths.append(merged_path)
            total_pages = self.pdf_merger.merge_files(
                temp_paths[:-1], merged_path, stamp_page_numbers=stamp_page_numbers
            )
            merged_content = merged_path.read_bytes()
            self.create_pdf_file(merged_content, filename)

            logger.info(
                "[CONVERSION] 다중 변환 완료",
                extra={
                    "output_file": filename,
                    "total_pages": total_pages,
                    "merged_size": _format_bytes(len(merged_content)),
                    "duration": _format_duration(time.time() - total_start),
                },
            )
            return RenderedDocument(
                filename=filename, renderer=self.renderer.name, content=merged_content
            )

        except Exception as e:
            logger.error(
                "[CONVERSION] 다중 변환 실패",
                extra={"url_count": len(requests), "error": str(e), "error_type": type(e).__name__},
                exc_info=True,
            )
            raise ConversionFailedError(f"URL → PDF 변환을 완료할 수 없습니다: {e}") from e

        finally:
            for temp_path in temp_paths:
                temp_path.unlink(missing_ok=True)

            if not keep_session:
                session.terminate_current()

    def create_pdf_file(self, content: bytes, filename: str) -> StoredFile:
        """PDF 내용을 저장소에 저장합니다.

        같은 이름의 파일이 있으면 삭제 후 다시 만듭니다.
        """
        existing = self.storage.fetch(filename, self.renderer.name)
        if existing is not None:
            self.storage.delete(existing)
        return self.storage.store(filename, self.renderer.name, content)

    def get_converted_pdf(self, filename: str) -> StoredFile | None:
        """이전에 변환된 PDF를 조회합니다."""
        return self.storage.fetch(filename, self.renderer.name)

    async def _render(
        self,
        request: ConversionRequest,
        user_id: str,
        filename: str,
        session: CurrentSession,
    ) -> bytes:
        """접근 키를 발급하고 프록시 URL을 렌더링합니다."""
        options: dict[str, Any] = self.renderer.validate_options(request.render_options())

        key = self.key_manager.issue(user_id, request.url)
        session.track(key.value)
        proxy_url = self.get_proxy_url(request.url, key.value)

        return await self.renderer.generate(
            proxy_url,
            filename,
            options,
            cookie=request.cookie,
            window_size=request.window_size,
            user_agent=request.user_agent,
            js_condition=request.js_condition,
            js_condition_params=list(request.js_condition_params) or None,
        )

    @staticmethod
    def _create_temp_path() -> Path:
        fd, temp_name = tempfile.mkstemp(prefix="pdfpages_merged_", suffix=".pdf")
        os.close(fd)
        return Path(temp_name)
