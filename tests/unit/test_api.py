"""API 라우터 테스트."""

from collections.abc import Callable, Iterator

import fitz
import pytest
from fastapi.testclient import TestClient

from pdfpages.api.routes import conversions, proxy
from pdfpages.core.config.settings import Settings, settings
from pdfpages.infrastructure.access import (
    AccessKeyManager,
    SessionManager,
    StaticCapabilityProvider,
)
from pdfpages.infrastructure.storage import LocalFileStorage
from pdfpages.main import app
from pdfpages.services.conversion_service import ConversionService

TARGET_URL = "https://lms.example.com/mod/quiz/review.php?attempt=1"
PROXY_PATH = f"{settings.api_v1_prefix}/convert-proxy"
CONVERSIONS_PATH = f"{settings.api_v1_prefix}/conversions"
AUTH_HEADERS = {"X-Internal-Api-Key": settings.internal_api_secret, "X-User-Id": "42"}


@pytest.fixture
def client() -> Iterator[TestClient]:
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def allow_all(key_manager: AccessKeyManager) -> None:
    app.dependency_overrides[proxy.get_key_manager] = lambda: key_manager
    app.dependency_overrides[proxy.get_capability_provider] = lambda: StaticCapabilityProvider(
        ["*"]
    )


class TestHealthApi:
    def test_헬스_체크(self, client: TestClient) -> None:
        response = client.get(f"{settings.api_v1_prefix}/health")

        assert response.status_code == 200
        body = response.json()
        assert body["renderer"] == settings.renderer
        assert body["status"] == ("healthy" if body["renderer_enabled"] else "degraded")


class TestProxyApi:
    """변환 프록시 엔드포인트 테스트."""

    def test_유효한_키는_대상_URL로_리다이렉트한다(
        self,
        client: TestClient,
        allow_all: None,
        key_manager: AccessKeyManager,
        session_manager: SessionManager,
    ) -> None:
        """세션 쿠키를 설정하고 대상 URL로 302 응답한다."""
        # Given
        key = key_manager.issue("42", TARGET_URL)

        # When
        response = client.get(
            PROXY_PATH,
            params={"url": TARGET_URL, "key": key.value, "instance": 7},
            follow_redirects=False,
        )

        # Then
        assert response.status_code == 302
        assert response.headers["location"] == TARGET_URL

        session_id = response.cookies.get(settings.session_cookie_name)
        assert session_id
        assert session_manager.get(session_id) == "42"
        assert "httponly" in response.headers["set-cookie"].lower()

    def test_사용한_키로_다시_접근하면_401(
        self, client: TestClient, allow_all: None, key_manager: AccessKeyManager
    ) -> None:
        key = key_manager.issue("42", TARGET_URL)
        params = {"url": TARGET_URL, "key": key.value, "instance": 7}

        first = client.get(PROXY_PATH, params=params, follow_redirects=False)
        second = client.get(PROXY_PATH, params=params, follow_redirects=False)

        assert first.status_code == 302
        assert second.status_code == 401

    def test_다른_인스턴스의_키는_401(
        self, client: TestClient, allow_all: None, key_manager: AccessKeyManager
    ) -> None:
        key = key_manager.issue("42", TARGET_URL)

        response = client.get(
            PROXY_PATH,
            params={"url": TARGET_URL, "key": key.value, "instance": 8},
            follow_redirects=False,
        )

        assert response.status_code == 401

    def test_키의_대상_URL과_다르면_401이고_세션을_남기지_않는다(
        self,
        client: TestClient,
        allow_all: None,
        key_manager: AccessKeyManager,
        session_manager: SessionManager,
    ) -> None:
        key = key_manager.issue("42", TARGET_URL)

        response = client.get(
            PROXY_PATH,
            params={"url": "https://evil.example.com/", "key": key.value, "instance": 7},
            follow_redirects=False,
        )

        assert response.status_code == 401
        assert key_manager.session_for(key.value) is not None
        assert session_manager.get(key_manager.session_for(key.value)) is None

    def test_PDF_생성_권한이_없으면_403(
        self, client: TestClient, key_manager: AccessKeyManager
    ) -> None:
        # Given
        app.dependency_overrides[proxy.get_key_manager] = lambda: key_manager
        app.dependency_overrides[proxy.get_capability_provider] = (
            lambda: StaticCapabilityProvider(["99"])
        )
        key = key_manager.issue("42", TARGET_URL)

        # When
        response = client.get(
            PROXY_PATH,
            params={"url": TARGET_URL, "key": key.value, "instance": 7},
            follow_redirects=False,
        )

        # Then
        assert response.status_code == 403

    def test_영숫자가_아닌_키는_검증_오류(self, client: TestClient, allow_all: None) -> None:
        response = client.get(
            PROXY_PATH,
            params={"url": TARGET_URL, "key": "abc-123", "instance": 7},
            follow_redirects=False,
        )

        assert response.status_code == 422


@pytest.fixture
def service_factory(
    test_settings: Settings,
    key_manager: AccessKeyManager,
    storage: LocalFileStorage,
    fake_renderer_factory: Callable[..., object],
) -> Callable[..., ConversionService]:
    """변환 서비스를 만들고 라우터 의존성으로 등록합니다."""

    def _factory(**renderer_kwargs: object) -> ConversionService:
        service = ConversionService(
            config=test_settings,
            renderer=fake_renderer_factory(**renderer_kwargs),
            key_manager=key_manager,
            storage=storage,
        )
        app.dependency_overrides[conversions.get_conversion_service] = lambda: service
        return service

    return _factory


class TestConversionsApi:
    """변환 엔드포인트 테스트."""

    def test_내부_API_키가_틀리면_401(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service_factory()

        response = client.post(
            CONVERSIONS_PATH,
            json={"url": TARGET_URL},
            headers={"X-Internal-Api-Key": "wrong", "X-User-Id": "42"},
        )

        assert response.status_code == 401

    def test_단일_URL을_변환한다(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        # Given
        service_factory()

        # When
        response = client.post(
            CONVERSIONS_PATH,
            json={"url": TARGET_URL, "filename": "quiz.pdf", "options": {"landscape": True}},
            headers=AUTH_HEADERS,
        )

        # Then
        assert response.status_code == 201
        body = response.json()
        assert body["filename"] == "quiz.pdf"
        assert body["renderer"] == "fake"
        assert body["size"] > 0

    def test_잘못된_URL은_400(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service_factory()

        response = client.post(CONVERSIONS_PATH, json={"url": "not-a-url"}, headers=AUTH_HEADERS)

        assert response.status_code == 400

    def test_렌더링_실패는_502(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service_factory(fail_on_call=0)

        response = client.post(CONVERSIONS_PATH, json={"url": TARGET_URL}, headers=AUTH_HEADERS)

        assert response.status_code == 502

    def test_렌더러를_사용할_수_없으면_503(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service = service_factory()
        service.renderer.is_enabled = lambda: False

        response = client.post(CONVERSIONS_PATH, json={"url": TARGET_URL}, headers=AUTH_HEADERS)

        assert response.status_code == 503

    def test_여러_URL을_병합_변환한다(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        # Given
        service_factory(pages_per_call=[2, 1])

        # When
        response = client.post(
            f"{CONVERSIONS_PATH}/batch",
            json={
                "requests": [{"url": TARGET_URL}, {"url": TARGET_URL.replace("1", "2")}],
                "output_filename": "attempts.pdf",
                "stamp_page_numbers": True,
            },
            headers=AUTH_HEADERS,
        )

        # Then
        assert response.status_code == 201
        assert response.json()["filename"] == "attempts.pdf"

        download = client.get(f"{CONVERSIONS_PATH}/attempts.pdf", headers=AUTH_HEADERS)
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        with fitz.open(stream=download.content, filetype="pdf") as doc:
            assert len(doc) == 3
            assert "Page 3 of 3" in doc[2].get_text()

    def test_빈_병합_요청은_400(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service_factory()

        response = client.post(
            f"{CONVERSIONS_PATH}/batch", json={"requests": []}, headers=AUTH_HEADERS
        )

        assert response.status_code == 400

    def test_없는_파일은_404(
        self, client: TestClient, service_factory: Callable[..., ConversionService]
    ) -> None:
        service_factory()

        response = client.get(f"{CONVERSIONS_PATH}/missing.pdf", headers=AUTH_HEADERS)

        assert response.status_code == 404

    def test_렌더러_목록을_조회한다(self, client: TestClient) -> None:
        response = client.get(f"{CONVERSIONS_PATH}/renderers", headers=AUTH_HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["selected"] == settings.renderer
        assert "null" in body["available"]
