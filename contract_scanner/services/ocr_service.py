"""
OCR for photographed contract pages using Tesseract.
"""
import io
import logging
import os
import shutil
from typing import Iterable, Union

import pytesseract
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

ImageSource = Union[str, bytes, Image.Image]


class OCRError(Exception):
    """Base exception for OCR failures."""

    message = "OCR failed"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidImageError(OCRError):
    message = "Invalid image format"


class NoTextFoundError(OCRError):
    message = "No text could be recognized"


class RecognitionFailedError(OCRError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Text recognition failed: {reason}")


def _configure_tesseract() -> None:
    """Point pytesseract at TESSERACT_PATH when set, else leave PATH lookup to it."""
    tesseract_path = os.getenv('TESSERACT_PATH')
    if tesseract_path and os.path.exists(tesseract_path):
        pytesseract.pytesseract.tesseract_cmd = tesseract_path
    elif shutil.which("tesseract") is None:
        logger.warning("Tesseract not found on PATH; set TESSERACT_PATH")


def _open_image(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    try:
        if isinstance(source, (bytes, bytearray)):
            return Image.open(io.BytesIO(source))
        return Image.open(source)
    except (UnidentifiedImageError, OSError) as e:
        logger.error(f"Could not open image: {e}")
        raise InvalidImageError()


class OCRService:
    """Recognize text on one or several page images."""

    def __init__(self, lang: str = "chi_sim+eng"):
        self.lang = lang
        _configure_tesseract()

    def recognize_image(self, source: ImageSource) -> str:
        """
        Recognize text on a single image.

        Raises:
            InvalidImageError: If the image can't be decoded.
            NoTextFoundError: If recognition produced no text.
            RecognitionFailedError: If Tesseract itself failed.
        """
        image = _open_image(source)
        try:
            text = pytesseract.image_to_string(image, lang=self.lang)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError) as e:
            logger.error(f"Tesseract failed: {e}")
            raise RecognitionFailedError(str(e))

        text = "\n".join(line for line in text.splitlines() if line.strip())
        if not text:
            raise NoTextFoundError()
        return text

    def recognize_text(self, images: Iterable[ImageSource]) -> str:
        """
        Recognize a multi-page document, labelling each page.

        Returns:
            "[Page 1]\\n...\\n\\n[Page 2]\\n..." for every page in order.
        """
        pages = []
        for index, image in enumerate(images, 1):
            logger.info(f"Recognizing page {index}")
            pages.append(f"[Page {index}]\n{self.recognize_image(image)}")

        if not pages:
            raise NoTextFoundError()
        return "\n\n".join(pages)
