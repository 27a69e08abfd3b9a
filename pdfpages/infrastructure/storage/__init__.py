"""변환 결과 파일 저장소."""

from pdfpages.infrastructure.storage.file_storage import LocalFileStorage, StoredFile

__all__ = [
    "LocalFileStorage",
    "StoredFile",
]
