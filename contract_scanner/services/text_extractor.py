"""
Text extraction for imported contract documents.
Supports PDF, DOCX, plain text and page images (via OCR).
"""
import re
import logging
from pathlib import Path
from typing import Optional

import docx
from pdfminer.high_level import extract_text as pdf_extract_text
from pdfminer.pdfparser import PDFSyntaxError

from contract_scanner.services.ocr_service import OCRService

logger = logging.getLogger(__name__)

# Maximum characters to extract to avoid runaway prompts
MAX_TEXT_LENGTH = 2_000_000

IMAGE_SUFFIXES = {'.jpg', '.jpeg', '.png', '.tif', '.tiff', '.bmp'}
SUPPORTED_SUFFIXES = {'.pdf', '.docx', '.txt'} | IMAGE_SUFFIXES


class TextExtractionError(RuntimeError):
    """Raised when a document can't be turned into text."""


class UnsupportedFileTypeError(TextExtractionError):
    """Raised for file extensions we don't import."""


def _normalize_whitespace(text: str) -> str:
    """
    Normalize whitespace and remove control characters.

    Args:
        text: Raw extracted text.

    Returns:
        Cleaned text with normalized whitespace.
    """
    # Remove control characters except newline, tab, carriage return
    text = re.sub(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F-\x9F]', '', text)

    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r'\n{3,}', '\n\n', text)

    lines = [line.strip() for line in text.split('\n')]
    return '\n'.join(lines).strip()


def _extract_docx_text(path: Path) -> str:
    """Paragraphs in order, followed by table rows (cells joined by ' | ')."""
    try:
        document = docx.Document(str(path))
    except Exception as e:
        logger.error(f"Failed to open DOCX file: {type(e).__name__}")
        raise TextExtractionError("Failed to read DOCX file. The file may be corrupted.")

    parts = [para.text for para in document.paragraphs if para.text.strip()]

    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(' | '.join(cells))

    logger.info(f"Extracted {len(parts)} blocks from DOCX file")
    return '\n'.join(parts)


def _extract_pdf_text(path: Path) -> str:
    try:
        text = pdf_extract_text(str(path))
    except PDFSyntaxError:
        logger.error("PDF file has syntax errors")
        raise TextExtractionError("Failed to extract text from PDF. The file may be corrupted.")
    except Exception as e:
        logger.error(f"Failed to extract text from PDF: {type(e).__name__}")
        raise TextExtractionError(
            "Failed to extract text from PDF. The file may be encrypted, corrupted, or in an unsupported format."
        )

    if not text or not text.strip():
        raise TextExtractionError("PDF appears to be empty or contains only images")

    logger.info(f"Extracted {len(text)} characters from PDF file")
    return text


def _extract_plain_text(path: Path) -> str:
    try:
        return path.read_text(encoding='utf-8')
    except UnicodeDecodeError:
        logger.warning("Text file is not UTF-8, retrying as GB18030")
        return path.read_text(encoding='gb18030', errors='replace')


def extract_text(path: Path, ocr: Optional[OCRService] = None) -> str:
    """
    Extract text from an imported contract document.

    Args:
        path: Path to the document file.
        ocr: OCR service used for image files (created on demand).

    Returns:
        Normalized text content.

    Raises:
        TextExtractionError: If the file is missing or extraction fails.
        UnsupportedFileTypeError: If the extension isn't supported.
        OCRError: If an image can't be recognized.
    """
    path = Path(path)
    if not path.exists():
        raise TextExtractionError("Contract file not found")

    suffix = path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        logger.error(f"Unsupported file format: {suffix}")
        raise UnsupportedFileTypeError(
            f"Unsupported file format: {suffix}. Supported: {', '.join(sorted(SUPPORTED_SUFFIXES))}"
        )

    if suffix == '.docx':
        raw_text = _extract_docx_text(path)
    elif suffix == '.pdf':
        raw_text = _extract_pdf_text(path)
    elif suffix == '.txt':
        raw_text = _extract_plain_text(path)
    else:
        ocr = ocr or OCRService()
        raw_text = ocr.recognize_text([str(path)])

    normalized_text = _normalize_whitespace(raw_text)

    if len(normalized_text) > MAX_TEXT_LENGTH:
        logger.warning(f"Text length {len(normalized_text)} exceeds maximum {MAX_TEXT_LENGTH}, truncating")
        normalized_text = normalized_text[:MAX_TEXT_LENGTH]

    logger.info(f"Text extraction complete: {len(normalized_text)} characters after normalization")
    return normalized_text
