"""변환 PDF 파일 저장소.

로컬 디렉토리에 {저장소}/{소유 네임스페이스}/{파일명} 형태로 저장합니다.
같은 이름의 파일을 덮어쓰지 않으므로 호출자가 먼저 삭제해야 합니다.
"""

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredFile:
    """저장된 파일 핸들."""

    logical_name: str
    owner_namespace: str
    path: Path

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    def read_bytes(self) -> bytes:
        return self.path.read_bytes()

    def copy_to_temp(self, temp_dir: str | Path | None = None) -> Path:
        """파일 내용을 임시 파일로 복사하고 경로를 반환합니다.

        임시 파일 삭제는 호출자의 책임입니다.
        """
        fd, temp_name = tempfile.mkstemp(prefix="pdfpages_", suffix=".pdf", dir=temp_dir)
        os.close(fd)
        temp_path = Path(temp_name)
        try:
            shutil.copyfile(self.path, temp_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise
        return temp_path


class LocalFileStorage:
    """로컬 디렉토리 기반 파일 저장소.

    사용법:
        storage = LocalFileStorage("./data/pdfpages")
        stored = storage.store("report.pdf", "chromium", pdf_bytes)
    """

    def __init__(self, base_dir: str | Path) -> None:
        """저장소를 초기화합니다.

        Args:
            base_dir: 저장 디렉토리 경로
        """
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def store(self, logical_name: str, owner_namespace: str, content: bytes) -> StoredFile:
        """파일을 저장합니다.

        Raises:
            FileExistsError: 같은 이름의 파일이 이미 있는 경우
            ValueError: 파일명이나 네임스페이스가 경로를 포함하는 경우
        """
        path = self._path_for(logical_name, owner_namespace)
        path.parent.mkdir(parents=True, exist_ok=True)

        # "xb" 모드로 열어 동시에 같은 이름을 만드는 경우에도 덮어쓰지 않음
        with path.open("xb") as f:
            f.write(content)

        logger.debug(
            "[STORAGE] 파일 저장",
            extra={"logical_name": logical_name, "owner_namespace": owner_namespace, "size": len(content)},
        )
        return StoredFile(logical_name=logical_name, owner_namespace=owner_namespace, path=path)

    def fetch(self, logical_name: str, owner_namespace: str) -> StoredFile | None:
        """저장된 파일을 조회합니다. 없으면 None."""
        path = self._path_for(logical_name, owner_namespace)
        if not path.is_file():
            return None
        return StoredFile(logical_name=logical_name, owner_namespace=owner_namespace, path=path)

    def delete(self, handle: StoredFile) -> None:
        """저장된 파일을 삭제합니다."""
        handle.path.unlink(missing_ok=True)
        logger.debug(
            "[STORAGE] 파일 삭제",
            extra={"logical_name": handle.logical_name, "owner_namespace": handle.owner_namespace},
        )

    def _path_for(self, logical_name: str, owner_namespace: str) -> Path:
        for part in (logical_name, owner_namespace):
            if not part or Path(part).name != part or part in (".", ".."):
                raise ValueError(f"유효하지 않은 파일 이름입니다: {part!r}")
        return self.base_dir / owner_namespace / logical_name
