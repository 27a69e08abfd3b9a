"""서비스 계층.

URL → PDF 변환 흐름(접근 키, 렌더링, 병합, 저장)을 조율합니다.
"""

from pdfpages.services.conversion_service import (
    ConversionFailedError,
    ConversionService,
    InvalidInputError,
)

__all__ = [
    "ConversionFailedError",
    "ConversionService",
    "InvalidInputError",
]
