from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .models import ContentType

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".png", ".jpg", ".jpeg", ".tif", ".tiff", ".bmp", ".webp"}
TEXT_SUFFIXES = {".txt", ".text", ".md"}
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


class TextExtractor:
    """
    Abstract text extractor. Implementations turn one stored file into plain
    text and should be stateless and reusable.
    """

    def extract(self, path: Path) -> str:
        raise NotImplementedError


class PlainTextExtractor(TextExtractor):
    def extract(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace")


class PdfTextExtractor(TextExtractor):
    """
    Extracts the text layer of a PDF with pypdf. Pages are separated by a
    blank line so they also read as paragraphs.
    """

    def extract(self, path: Path) -> str:
        try:
            reader = PdfReader(str(path))
            parts = []
            for page in reader.pages:
                parts.append((page.extract_text() or "") + "\n\n")
        except PdfReadError as exc:
            raise ValueError(f"Could not read file {Path(path).name}: {exc}") from exc
        return "".join(parts)


class DoclingTextExtractor(TextExtractor):
    """
    Docling-based extractor for DOCX files and OCR captures (images).

    Docling is heavy, so it is only imported when this extractor is built.
    Images go through Docling's PDF pipeline with RapidOCR enabled.
    """

    def __init__(self, perform_ocr: bool = True, num_threads: int = 4):
        try:
            from docling.datamodel.accelerator_options import AcceleratorDevice, AcceleratorOptions
            from docling.datamodel.base_models import InputFormat
            from docling.datamodel.pipeline_options import PdfPipelineOptions, RapidOcrOptions
            from docling.document_converter import DocumentConverter, ImageFormatOption
        except ImportError as exc:  # pragma: no cover - dependency guard
            raise RuntimeError("Docling is required for DOCX/OCR extraction. Please install 'docmate[ocr]'.") from exc

        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_ocr = perform_ocr
        pipeline_options.ocr_options = RapidOcrOptions()
        pipeline_options.accelerator_options = AcceleratorOptions(
            num_threads=num_threads, device=AcceleratorDevice.AUTO
        )
        self.converter = DocumentConverter(
            format_options={
                InputFormat.IMAGE: ImageFormatOption(pipeline_options=pipeline_options),
            }
        )

    def extract(self, path: Path) -> str:
        try:
            result = self.converter.convert(Path(path))
        except Exception as exc:
            raise RuntimeError(f"extraction failed for {path}") from exc
        return result.document.export_to_text()


def detect_content_type(filename: str, mime_type: Optional[str] = None) -> ContentType:
    suffix = Path(filename).suffix.lower()
    mime_type = (mime_type or "").lower()
    if mime_type == "application/pdf" or suffix == ".pdf":
        return ContentType.PDF
    if mime_type == DOCX_MIME or suffix == ".docx":
        return ContentType.DOCX
    if mime_type.startswith("text/") or suffix in TEXT_SUFFIXES:
        return ContentType.TEXT
    if mime_type.startswith("image/") or suffix in IMAGE_SUFFIXES:
        return ContentType.OCR
    raise ValueError("Unsupported file type")


def build_extractor(content_type: ContentType, perform_ocr: bool = True) -> TextExtractor:
    if content_type == ContentType.TEXT:
        return PlainTextExtractor()
    if content_type == ContentType.PDF:
        return PdfTextExtractor()
    logger.info("Loading Docling for %s extraction", content_type.value)
    return DoclingTextExtractor(perform_ocr=perform_ocr)
