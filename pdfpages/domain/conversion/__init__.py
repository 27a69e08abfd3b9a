"""URL → PDF 변환 도메인.

변환 요청, 접근 키, 병합 작업 등 도메인 모델을 정의합니다.
"""

from pdfpages.domain.conversion.models import (
    AccessKey,
    ConversionRequest,
    CookieSpec,
    MergeJob,
    ReadinessState,
    RedeemedKey,
    RenderedDocument,
    is_target_url,
)

__all__ = [
    "AccessKey",
    "ConversionRequest",
    "CookieSpec",
    "MergeJob",
    "ReadinessState",
    "RedeemedKey",
    "RenderedDocument",
    "is_target_url",
]
