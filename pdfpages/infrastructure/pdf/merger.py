"""PDF 병합기.

PyMuPDF(fitz)를 사용하여 여러 PDF 파일을 하나로 병합하고,
필요하면 모든 페이지에 "Page X of Y" 바닥글을 넣습니다.
"""

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Final

import fitz  # PyMuPDF

from pdfpages.domain.conversion.models import MergeJob

logger = logging.getLogger(__name__)


class SourceUnreadableError(Exception):
    """병합할 PDF 파일을 열 수 없음."""

    pass


class PDFMerger:
    """PDF 병합기.

    각 원본 페이지를 insert_pdf로 그대로 복사하므로 페이지마다
    원래의 크기와 방향(회전)이 유지됩니다.

    사용법:
        merger = PDFMerger()
        merger.merge_files([first_path, second_path], output_path, stamp_page_numbers=True)
    """

    # 바닥글 글꼴 및 위치 (포인트 단위, 페이지 오른쪽 아래 기준)
    FOOTER_FONT: Final[str] = "helv"
    FOOTER_FONT_SIZE: Final[float] = 12
    FOOTER_RIGHT_MARGIN: Final[float] = 18
    FOOTER_BOTTOM_MARGIN: Final[float] = 16

    def merge_job(self, job: MergeJob) -> int:
        """MergeJob을 실행합니다."""
        return self.merge_files(job.source_paths, job.destination_path, job.stamp_page_numbers)

    def merge_files(
        self,
        source_paths: Sequence[str | Path],
        destination_path: str | Path,
        stamp_page_numbers: bool = False,
    ) -> int:
        """여러 PDF 파일을 순서대로 병합하여 저장합니다.

        Args:
            source_paths: 병합할 PDF 파일 경로 리스트 (순서대로 병합됨)
            destination_path: 병합 결과를 저장할 경로
            stamp_page_numbers: 모든 페이지에 "Page X of Y" 바닥글 추가 여부

        Returns:
            병합된 문서의 전체 페이지 수

        Raises:
            SourceUnreadableError: 원본 PDF를 열 수 없는 경우 (결과 파일은 저장되지 않음)
            ValueError: 빈 리스트가 전달된 경우
        """
        if not source_paths:
            raise ValueError("병합할 PDF가 없습니다")

        merged_doc = fitz.open()
        try:
            for idx, source_path in enumerate(source_paths):
                source_doc = self._open_source(idx, Path(source_path))
                try:
                    merged_doc.insert_pdf(source_doc)
                    logger.debug(
                        f"PDF #{idx + 1} 병합 완료",
                        extra={"pages": len(source_doc)},
                    )
                finally:
                    source_doc.close()

            total_pages = len(merged_doc)
            if stamp_page_numbers:
                self._stamp_page_numbers(merged_doc)

            merged_doc.save(str(destination_path), garbage=3, deflate=True)
        finally:
            merged_doc.close()

        logger.info(
            "PDF 병합 완료",
            extra={
                "input_count": len(source_paths),
                "total_pages": total_pages,
                "stamped": stamp_page_numbers,
            },
        )
        return total_pages

    def _open_source(self, idx: int, path: Path) -> fitz.Document:
        """원본 PDF를 엽니다. PDF가 아니면 SourceUnreadableError."""
        if not path.is_file():
            raise SourceUnreadableError(f"PDF #{idx + 1} 파일을 찾을 수 없습니다: {path}")

        try:
            doc = fitz.open(str(path), filetype="pdf")
        except Exception as e:
            raise SourceUnreadableError(
                f"PDF #{idx + 1} 데이터를 처리할 수 없습니다: {e}"
            ) from e

        if not doc.is_pdf or len(doc) == 0:
            doc.close()
            raise SourceUnreadableError(f"PDF #{idx + 1} 는 유효한 PDF 문서가 아닙니다: {path}")
        return doc

    def _stamp_page_numbers(self, doc: fitz.Document) -> None:
        """모든 페이지에 문서 전체 기준의 쪽 번호를 넣습니다."""
        total = len(doc)
        for page in doc:
            label = f"Page {page.number + 1} of {total}"

            width = fitz.get_text_length(
                label, fontname=self.FOOTER_FONT, fontsize=self.FOOTER_FONT_SIZE
            )

            # page.rect는 회전이 적용된 보이는 좌표계. 기준선 위치를 계산한 뒤
            # 회전 전 좌표로 되돌리고 글자도 같은 각도로 돌림
            visible = page.rect
            baseline = fitz.Point(
                visible.x1 - self.FOOTER_RIGHT_MARGIN - width,
                visible.y1 - self.FOOTER_BOTTOM_MARGIN,
            )
            page.insert_text(
                baseline * page.derotation_matrix,
                label,
                fontname=self.FOOTER_FONT,
                fontsize=self.FOOTER_FONT_SIZE,
                rotate=page.rotation,
            )
