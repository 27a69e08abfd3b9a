"""URL → PDF 변환 도메인 모델."""

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReadinessState(str, Enum):
    """페이지 준비 상태 대기 단계."""

    PENDING = "pending"
    SATISFIED = "satisfied"
    TIMED_OUT = "timed_out"


class CookieSpec(BaseModel):
    """렌더링 시 브라우저에 설치할 쿠키."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, description="쿠키 이름")
    value: str = Field(..., min_length=1, description="쿠키 값")


class ConversionRequest(BaseModel):
    """단일 URL 변환 요청.

    생성 이후에는 변경할 수 없습니다. 렌더러 옵션은 여기서 검증하지 않고
    렌더러의 허용 목록으로 걸러집니다 (알 수 없는 키는 조용히 버려짐).
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="변환할 대상 URL")
    filename: str | None = Field(default=None, description="저장할 파일명")
    options: Mapping[str, Any] = Field(
        default_factory=dict, validate_default=True, description="렌더러 옵션 (읽기 전용)"
    )
    cookie: CookieSpec | None = Field(default=None, description="적용할 쿠키")
    window_size: tuple[int, int] | None = Field(
        default=None, description="브라우저 창 크기 (예: [1920, 1080])"
    )
    user_agent: str | None = Field(default=None, description="사용자 정의 User-Agent")
    js_condition: str | None = Field(
        default=None, description="페이지 준비 여부를 반환하는 JavaScript 함수"
    )
    js_condition_params: tuple[Any, ...] = Field(
        default=(), description="JavaScript 함수에 전달할 인자 목록"
    )
    keep_session: bool = Field(default=False, description="변환 후 세션 유지 여부")

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        if not is_target_url(value):
            raise ValueError(f"유효한 http(s) URL이 아닙니다: {value}")
        return value

    @field_validator("options")
    @classmethod
    def _freeze_options(cls, value: Mapping[str, Any]) -> Mapping[str, Any]:
        # 호출자의 딕셔너리와 분리된 읽기 전용 사본
        return MappingProxyType(dict(value))

    @field_validator("window_size")
    @classmethod
    def _validate_window_size(cls, value: tuple[int, int] | None) -> tuple[int, int] | None:
        if value is not None and (value[0] <= 0 or value[1] <= 0):
            raise ValueError("창 크기는 양수여야 합니다")
        return value

    def render_options(self) -> dict[str, Any]:
        """렌더 컨텍스트 필드를 포함한 전체 옵션을 반환합니다.

        명시적 필드가 옵션 맵의 같은 키보다 우선합니다.
        """
        merged = dict(self.options)
        if self.window_size is not None:
            merged["windowSize"] = list(self.window_size)
        if self.user_agent:
            merged["userAgent"] = self.user_agent
        if self.js_condition:
            merged["jsCondition"] = self.js_condition
        if self.js_condition_params:
            merged["jsConditionParams"] = list(self.js_condition_params)
        return merged


@dataclass(frozen=True)
class AccessKey:
    """단일 사용 접근 키."""

    value: str
    user_id: str
    target_url: str
    instance_id: int
    expires_at: datetime

    def is_expired(self, now: datetime | None = None) -> bool:
        """만료 여부를 반환합니다."""
        return (now or datetime.now(UTC)) >= self.expires_at


@dataclass(frozen=True)
class RedeemedKey:
    """접근 키 사용 결과."""

    user_id: str
    target_url: str
    session_id: str


class RenderedDocument(BaseModel):
    """렌더링된 PDF 문서."""

    filename: str = Field(..., description="저장 파일명")
    renderer: str = Field(..., description="생성한 렌더러 이름")
    content: bytes = Field(..., repr=False, description="PDF 바이트 데이터")

    @property
    def size(self) -> int:
        """PDF 크기 (바이트)."""
        return len(self.content)


@dataclass(frozen=True)
class MergeJob:
    """PDF 병합 작업.

    source_paths 순서가 결과 문서의 페이지 순서가 됩니다.
    """

    source_paths: tuple[Path, ...]
    destination_path: Path
    stamp_page_numbers: bool = False


def is_target_url(value: object) -> bool:
    """http(s) 스킴과 호스트를 가진 URL인지 확인합니다."""
    if not isinstance(value, str):
        return False
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
