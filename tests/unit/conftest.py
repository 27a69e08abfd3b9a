"""공통 테스트 픽스처."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

import fitz
import pytest

from pdfpages.core.config.settings import Settings
from pdfpages.infrastructure.access import AccessKeyManager, SessionManager
from pdfpages.infrastructure.renderer import filter_options
from pdfpages.infrastructure.storage import LocalFileStorage

A4 = (595.0, 842.0)
LETTER_LANDSCAPE = (792.0, 612.0)


def build_pdf(page_sizes: Sequence[tuple[float, float]], label: str = "page") -> bytes:
    """주어진 페이지 크기로 PDF 바이트를 만듭니다."""
    doc = fitz.open()
    for idx, (width, height) in enumerate(page_sizes):
        page = doc.new_page(width=width, height=height)
        page.insert_text((72, 72), f"{label}-{idx + 1}", fontsize=14)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """PDF 바이트 생성 함수."""
    return build_pdf


@pytest.fixture
def write_pdf(tmp_path: Path) -> Callable[..., Path]:
    """PDF 파일 생성 함수."""

    def _write(name: str, page_sizes: Sequence[tuple[float, float]], label: str = "page") -> Path:
        path = tmp_path / name
        path.write_bytes(build_pdf(page_sizes, label))
        return path

    return _write


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """테스트용 설정."""
    return Settings(
        chromium_path="/usr/bin/chromium",
        chromium_response_timeout=5,
        storage_dir=str(tmp_path / "storage"),
        public_base_url="http://testserver",
        instance_id=7,
    )


@pytest.fixture
def session_manager() -> SessionManager:
    return SessionManager()


@pytest.fixture
def key_manager(session_manager: SessionManager) -> AccessKeyManager:
    return AccessKeyManager(session_manager, ttl_seconds=60, instance_id=7)


@pytest.fixture
def storage(tmp_path: Path) -> LocalFileStorage:
    return LocalFileStorage(tmp_path / "storage")


class FakeRenderer:
    """브라우저 대신 프록시 URL의 접근 키를 사용하고 PDF를 만들어 반환하는 렌더러."""

    name = "fake"
    VALID_OPTIONS = frozenset({"landscape", "scale", "jsCondition", "jsConditionParams"})

    def __init__(
        self,
        key_manager: AccessKeyManager,
        pages_per_call: Sequence[int] = (1,),
        fail_on_call: int | None = None,
    ) -> None:
        self.key_manager = key_manager
        self.pages_per_call = list(pages_per_call)
        self.fail_on_call = fail_on_call
        self.calls: list[dict[str, Any]] = []

    def is_enabled(self) -> bool:
        return True

    def validate_options(self, options: Any) -> dict[str, Any]:
        return filter_options(options, self.VALID_OPTIONS)

    async def generate(self, proxy_url: str, filename: str = "", options: Any = None, **kwargs: Any) -> bytes:
        call_index = len(self.calls)
        query = parse_qs(urlparse(proxy_url).query)
        self.calls.append(
            {"proxy_url": proxy_url, "filename": filename, "options": options, **kwargs}
        )

        # 브라우저가 프록시 엔드포인트에 접근한 것처럼 접근 키 사용
        redeemed = self.key_manager.redeem(query["key"][0], int(query["instance"][0]))
        self.calls[-1]["session_id"] = redeemed.session_id

        if self.fail_on_call == call_index:
            raise RuntimeError("browser crashed")

        pages = self.pages_per_call[call_index % len(self.pages_per_call)]
        return build_pdf([A4] * pages, label=f"doc{call_index + 1}")


@pytest.fixture
def fake_renderer_factory(key_manager: AccessKeyManager) -> Callable[..., FakeRenderer]:
    def _factory(**kwargs: Any) -> FakeRenderer:
        return FakeRenderer(key_manager, **kwargs)

    return _factory
