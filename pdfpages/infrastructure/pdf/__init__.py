"""PDF 처리 인프라스트럭처.

PyMuPDF를 사용하여 여러 PDF 파일을 병합하고 쪽 번호를 넣습니다.
"""

from pdfpages.infrastructure.pdf.merger import PDFMerger, SourceUnreadableError

__all__ = [
    "PDFMerger",
    "SourceUnreadableError",
]
