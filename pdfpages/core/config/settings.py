"""pydantic-settings를 활용한 애플리케이션 설정."""

from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """필수 설정값이 없을 때 발생하는 에러."""

    pass


class Settings(BaseSettings):
    """애플리케이션 환경 설정.

    환경 변수 또는 .env 파일에서 설정값을 로드합니다.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # 애플리케이션 기본 설정
    app_name: str = Field(default="pdfpages", description="애플리케이션 이름")
    app_version: str = Field(default="0.1.0", description="애플리케이션 버전")
    debug: bool = Field(default=False, description="디버그 모드 활성화 여부")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="로깅 레벨"
    )

    # API 설정
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 경로 접두사")
    cors_origins: list[str] = Field(
        default=["http://localhost:3000"], description="CORS 허용 오리진 목록"
    )
    public_base_url: str = Field(
        default="http://localhost:8000",
        description="헤드리스 브라우저가 프록시 엔드포인트에 접근할 때 사용하는 기본 URL",
    )
    internal_api_secret: str = Field(
        default="pdfpages-internal-secret", description="내부 서비스 간 통신용 API 키"
    )

    # 렌더러 설정
    renderer: str = Field(default="chromium", description="사용할 렌더러 이름")
    instance_id: int = Field(default=1, ge=0, description="렌더러 인스턴스 ID")
    chromium_path: str | None = Field(
        default=None, description="Chromium 실행 파일 경로"
    )
    chromium_response_timeout: int = Field(
        default=30, gt=0, description="Chromium 응답 타임아웃 (초)"
    )

    # 접근 키 / 세션 설정
    access_key_ttl_seconds: int = Field(
        default=120, gt=0, description="접근 키 유효 시간 (초)"
    )
    session_ttl_seconds: int = Field(
        default=3600, gt=0, description="프록시 로그인 세션 유효 시간 (초)"
    )
    session_cookie_name: str = Field(
        default="PDFPAGESSESSION", description="프록시 로그인 세션 쿠키 이름"
    )
    generate_pdf_users: list[str] = Field(
        default=["*"],
        description="PDF 생성 권한을 가진 사용자 ID 목록 ('*'는 전체 허용)",
    )

    # 파일 저장소 설정
    storage_dir: str = Field(default="./data/pdfpages", description="변환 PDF 저장 디렉토리")

    def get_config(self, key: str) -> Any:
        """설정값을 조회합니다.

        Args:
            key: 설정 키 (예: "chromium_path")

        Returns:
            설정값

        Raises:
            ConfigurationError: 키가 없거나 값이 비어있는 경우
        """
        if key not in type(self).model_fields:
            raise ConfigurationError(f"알 수 없는 설정 키입니다: {key}")

        value = getattr(self, key)
        if value is None or value == "":
            raise ConfigurationError(f"설정값이 비어있습니다: {key}")
        return value


# 전역 설정 인스턴스
settings = Settings()
