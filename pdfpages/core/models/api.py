"""API 요청/응답 모델 (DTO)."""

from typing import Any

from pydantic import BaseModel, Field

from pdfpages.domain.conversion.models import ConversionRequest, CookieSpec, RenderedDocument


class ConvertUrlRequestDTO(BaseModel):
    """단일 URL 변환 요청 DTO."""

    url: str = Field(..., description="변환할 대상 URL")
    filename: str | None = Field(default=None, description="저장할 파일명")
    options: dict[str, Any] = Field(
        default_factory=dict,
        description="렌더러 옵션 (허용되지 않은 키는 무시됨)",
        examples=[{"landscape": True, "printBackground": True, "marginTop": 0.4}],
    )
    cookie_name: str | None = Field(default=None, description="적용할 쿠키 이름")
    cookie_value: str | None = Field(default=None, description="적용할 쿠키 값")
    window_size: tuple[int, int] | None = Field(
        default=None, description="브라우저 창 크기", examples=[[1920, 1080]]
    )
    user_agent: str | None = Field(default=None, description="사용자 정의 User-Agent")
    js_condition: str | None = Field(
        default=None,
        description="페이지 준비 여부를 반환하는 JavaScript 함수",
        examples=["() => !!(window.MathJax && window.MathJax.typesetDone)"],
    )
    js_condition_params: list[Any] = Field(
        default_factory=list, description="JavaScript 함수 인자 목록"
    )
    keep_session: bool = Field(default=False, description="변환 후 세션 유지 여부")

    def to_domain(self) -> ConversionRequest:
        """도메인 모델로 변환합니다.

        Raises:
            pydantic.ValidationError: URL 등 값이 유효하지 않은 경우
        """
        cookie = None
        if self.cookie_name and self.cookie_value:
            cookie = CookieSpec(name=self.cookie_name, value=self.cookie_value)

        return ConversionRequest(
            url=self.url,
            filename=self.filename,
            options=self.options,
            cookie=cookie,
            window_size=self.window_size,
            user_agent=self.user_agent,
            js_condition=self.js_condition,
            js_condition_params=self.js_condition_params,
            keep_session=self.keep_session,
        )


class ConvertUrlsRequestDTO(BaseModel):
    """여러 URL 병합 변환 요청 DTO."""

    requests: list[ConvertUrlRequestDTO] = Field(
        ..., description="변환 요청 목록 (순서대로 병합됨)"
    )
    output_filename: str | None = Field(default=None, description="병합 PDF 파일명")
    stamp_page_numbers: bool = Field(
        default=False, description='모든 페이지에 "Page X of Y" 바닥글 추가 여부'
    )
    keep_session: bool = Field(default=False, description="변환 후 세션 유지 여부")


class ConversionResponseDTO(BaseModel):
    """변환 결과 응답 DTO."""

    filename: str = Field(..., description="저장된 파일명")
    renderer: str = Field(..., description="사용한 렌더러")
    size: int = Field(..., description="PDF 크기 (바이트)")

    @classmethod
    def from_domain(cls, document: RenderedDocument) -> "ConversionResponseDTO":
        """도메인 모델에서 응답 모델을 생성합니다."""
        return cls(filename=document.filename, renderer=document.renderer, size=document.size)


class RendererListResponseDTO(BaseModel):
    """사용 가능한 렌더러 목록 응답."""

    selected: str = Field(..., description="설정으로 선택된 렌더러")
    available: list[str] = Field(..., description="사용 가능한 렌더러 목록")


class HealthCheckResponse(BaseModel):
    """헬스 체크 응답 모델.

    서비스 상태 확인 API의 응답 형식을 정의합니다.
    """

    status: str = Field(default="healthy", description="서비스 상태 (healthy | degraded)")
    version: str = Field(description="애플리케이션 버전")
    service: str = Field(description="서비스 이름")
    renderer: str = Field(description="설정된 렌더러 이름")
    renderer_enabled: bool = Field(description="렌더러 사용 가능 여부")
