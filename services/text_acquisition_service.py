"""
Text acquisition service.

Turns uploads and product pages into plain text for the parser:
- Text files: decoded as UTF-8 (BOM tolerated), Latin-1 as a last resort
- PDFs: pdfplumber words regrouped into lines; wide gaps become tabs so
  spec tables survive as "key<TAB>value"
- Images: OCR with pytesseract inside an OcrSession (opt-in, ENABLE_OCR)
- Product pages: POSTed through the fetch proxy with requests

Failures are logged and degrade to "" (or an empty FetchedPage). The only
error that reaches the caller is a page fetch without a configured proxy.
"""

import re
from io import BytesIO
from pathlib import Path
from typing import Optional

import pdfplumber
import requests
import structlog

from config.settings import settings
from exceptions import (
    ProxyNotConfiguredError,
    TextExtractionError,
    UnsupportedFileTypeError,
)
from models.smart_paste import ExtractedTextResponse, FetchedPage, OcrText

logger = structlog.get_logger(__name__)

TEXT_EXTENSIONS = {".txt", ".text", ".csv", ".tsv", ".md", ".html", ".htm"}
PDF_EXTENSIONS = {".pdf"}
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".tif", ".tiff", ".bmp", ".gif"}

# PDF line grouping: words whose tops round to the same 3pt bucket share a line
PDF_LINE_BUCKET = 3
# Horizontal gap (pt) that separates table columns
PDF_COLUMN_GAP = 30
# Below this many characters a PDF is treated as scanned
PDF_MIN_TEXT_CHARS = 50

OCR_CONTRAST = 1.5
OCR_DPI = 200


# ===================
# OCR
# ===================

def clean_ocr_text(text: str) -> str:
    """
    Fix common OCR artifacts.

    - "|" → "I"
    - lowercase l between capitals/digits → "I" ("MODEl" stays, "MlC" → "MIC")
    - 3+ newlines collapsed, whitespace-only lines emptied
    """
    text = text.replace("|", "I")
    text = re.sub(r"(?<=[A-Z0-9])l(?=[A-Z0-9])", "I", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    text = re.sub(r"^\s+$", "", text, flags=re.MULTILINE)
    return text.strip()


class OcrSession:
    """
    Scoped OCR engine.

    The engine is loaded on first recognize() and released by close().
    Use as a context manager so one upload batch shares one engine:

        with OcrSession() as session:
            text = service.read_image(data, session)
    """

    def __init__(self, language: Optional[str] = None):
        self.language = language or settings.ocr_language
        self._engine = None
        self._image_module = None
        self.closed = False

    def __enter__(self) -> "OcrSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @property
    def started(self) -> bool:
        return self._engine is not None

    def _start(self) -> None:
        if self.closed:
            raise TextExtractionError("image", "OCR session already closed")
        try:
            import pytesseract
            from PIL import Image
        except ImportError as e:
            raise TextExtractionError(
                "image",
                "OCR engine not installed (pip install pytesseract pillow)",
                {"error": str(e)}
            ) from e
        self._engine = pytesseract
        self._image_module = Image
        logger.info("ocr_engine_started", language=self.language)

    def _enhance(self, image):
        """Grayscale plus contrast stretch; original image if that fails."""
        try:
            from PIL import ImageEnhance
            return ImageEnhance.Contrast(image.convert("L")).enhance(OCR_CONTRAST)
        except Exception as e:
            logger.debug("ocr_enhance_skipped", error=str(e))
            return image

    def recognize_image(self, image) -> OcrText:
        """
        OCR an already-open PIL image.

        Raises:
            TextExtractionError: If the engine is missing or fails
        """
        if not self.started:
            self._start()

        prepared = self._enhance(image)
        try:
            data = self._engine.image_to_data(
                prepared,
                lang=self.language,
                output_type=self._engine.Output.DICT,
            )
            raw_text = self._engine.image_to_string(prepared, lang=self.language)
        except Exception as e:
            raise TextExtractionError("image", f"OCR failed: {e}", {"error": str(e)}) from e

        confidences = [float(c) for c in data.get("conf", []) if float(c) >= 0]
        confidence = sum(confidences) / len(confidences) if confidences else 0.0

        return OcrText(text=clean_ocr_text(raw_text or ""), confidence=round(confidence, 1))

    def recognize(self, image_bytes: bytes) -> OcrText:
        """
        OCR raw image bytes (PNG, JPEG, WebP, TIFF, BMP).

        Raises:
            TextExtractionError: If the image cannot be opened or read
        """
        if not self.started:
            self._start()
        try:
            image = self._image_module.open(BytesIO(image_bytes))
            image.load()
        except Exception as e:
            raise TextExtractionError("image", "Image could not be opened", {"error": str(e)}) from e
        return self.recognize_image(image)

    def close(self) -> None:
        """Release the engine. Safe to call more than once."""
        if self._engine is not None:
            logger.info("ocr_engine_released")
        self._engine = None
        self._image_module = None
        self.closed = True


# ===================
# SERVICE
# ===================

class TextAcquisitionService:
    """
    Read uploads and product pages into plain text.

    Never raises for unreadable content; see module docstring.
    """

    def __init__(self, http_session: Optional[requests.Session] = None):
        self.http = http_session or requests.Session()

    # ===================
    # TEXT FILES
    # ===================

    def read_text_file(self, data: bytes) -> str:
        """Decode an uploaded text file ("" for empty input)."""
        if not data:
            return ""
        try:
            return data.decode("utf-8-sig")
        except UnicodeDecodeError:
            logger.info("text_file_not_utf8", size=len(data))
            return data.decode("latin-1")

    # ===================
    # PDF
    # ===================

    @staticmethod
    def _page_lines(page) -> list[str]:
        """Rebuild visual lines of one page from word positions."""
        rows: dict[int, list[dict]] = {}
        for word in page.extract_words(keep_blank_chars=False, use_text_flow=False):
            text = word.get("text", "")
            if not text.strip():
                continue
            bucket = round(word["top"] / PDF_LINE_BUCKET) * PDF_LINE_BUCKET
            rows.setdefault(bucket, []).append(word)

        lines = []
        for bucket in sorted(rows):
            words = sorted(rows[bucket], key=lambda w: w["x0"])
            line = words[0]["text"]
            for previous, word in zip(words, words[1:]):
                gap = word["x0"] - previous["x1"]
                line += ("\t" if gap > PDF_COLUMN_GAP else " ") + word["text"]
            lines.append(line.strip())
        return lines

    def _extract_pdf_text(self, data: bytes) -> tuple[str, int]:
        """Return (text layer, pages read)."""
        try:
            parts: list[str] = []
            with pdfplumber.open(BytesIO(data)) as pdf:
                pages = pdf.pages[:settings.max_pdf_pages]
                for number, page in enumerate(pages, start=1):
                    parts.extend(self._page_lines(page))
                    if number < len(pages):
                        parts.append("")
                if len(pdf.pages) > len(pages):
                    logger.warning("pdf_page_limit_reached", total_pages=len(pdf.pages), processed=len(pages))
            return "\n".join(parts), len(pages)
        except Exception as e:
            raise TextExtractionError("pdf", f"Failed to read PDF: {e}", {"error": str(e)}) from e

    def _ocr_pdf(self, data: bytes, session: OcrSession, page_count: int) -> str:
        """OCR one page at a time to keep memory flat."""
        try:
            from pdf2image import convert_from_bytes
        except ImportError as e:
            raise TextExtractionError("pdf", "pdf2image not installed", {"error": str(e)}) from e

        texts = []
        for page_number in range(1, page_count + 1):
            try:
                images = convert_from_bytes(
                    data,
                    dpi=OCR_DPI,
                    first_page=page_number,
                    last_page=page_number,
                    grayscale=True,
                    thread_count=1,
                )
            except Exception as e:
                logger.warning("pdf_page_rasterize_failed", page=page_number, error=str(e))
                continue
            if images:
                texts.append(session.recognize_image(images[0]).text)
                logger.debug("ocr_page_processed", page=page_number)
        return "\n\n".join(t for t in texts if t)

    def read_pdf(self, data: bytes, session: Optional[OcrSession] = None) -> str:
        """
        Extract text from a PDF, with OCR fallback for scanned documents.

        OCR is only attempted when ENABLE_OCR is on and the text layer has
        fewer than 50 characters.

        Returns:
            Extracted text, "" when unreadable
        """
        if not data:
            return ""

        try:
            text, page_count = self._extract_pdf_text(data)
        except TextExtractionError as e:
            logger.warning("pdf_extraction_failed", error=e.message, size=len(data))
            return ""

        if len(text.strip()) < PDF_MIN_TEXT_CHARS and settings.enable_ocr and page_count:
            logger.info("pdf_text_layer_insufficient", text_length=len(text.strip()))
            try:
                if session is None:
                    with OcrSession() as own_session:
                        ocr_text = self._ocr_pdf(data, own_session, page_count)
                else:
                    ocr_text = self._ocr_pdf(data, session, page_count)
            except TextExtractionError as e:
                logger.warning("pdf_ocr_failed", error=e.message)
                ocr_text = ""
            if len(ocr_text.strip()) > len(text.strip()):
                text = ocr_text

        logger.info("pdf_text_extracted", text_length=len(text))
        return text

    # ===================
    # IMAGES
    # ===================

    def ocr_image(self, data: bytes, session: Optional[OcrSession] = None) -> OcrText:
        """OCR an image; empty OcrText when disabled or failing."""
        if not data:
            return OcrText()
        if not settings.enable_ocr:
            logger.warning("ocr_disabled", hint="set ENABLE_OCR=true")
            return OcrText()

        try:
            if session is None:
                with OcrSession() as own_session:
                    result = own_session.recognize(data)
            else:
                result = session.recognize(data)
        except TextExtractionError as e:
            logger.warning("image_ocr_failed", error=e.message)
            return OcrText()

        logger.info("image_ocr_completed", text_length=len(result.text), confidence=result.confidence)
        return result

    def read_image(self, data: bytes, session: Optional[OcrSession] = None) -> str:
        """OCR an image and return only the text."""
        return self.ocr_image(data, session).text

    # ===================
    # PRODUCT PAGES
    # ===================

    def fetch_product_page(self, url: str) -> FetchedPage:
        """
        Fetch a product page through the proxy.

        Args:
            url: Product page URL

        Returns:
            FetchedPage; text/html empty when the fetch fails

        Raises:
            ProxyNotConfiguredError: If PRODUCT_PAGE_PROXY_URL is unset
        """
        proxy_url = settings.product_page_proxy_url
        if not proxy_url:
            raise ProxyNotConfiguredError()

        try:
            logger.info("fetching_product_page", url=url)
            response = self.http.post(
                proxy_url,
                json={"url": url},
                timeout=settings.http_timeout_seconds,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            logger.warning("product_page_fetch_failed", url=url, error=str(e))
            return FetchedPage(source_url=url)
        except ValueError as e:
            logger.warning("product_page_invalid_json", url=url, error=str(e))
            return FetchedPage(source_url=url)

        if not isinstance(data, dict):
            logger.warning("product_page_invalid_payload", url=url)
            return FetchedPage(source_url=url)

        page = FetchedPage(
            text=data.get("text") or "",
            html=data.get("html") or "",
            source_url=url,
        )
        logger.info("product_page_fetched", url=url, text_length=len(page.text), html_length=len(page.html))
        return page

    # ===================
    # UPLOAD DISPATCH
    # ===================

    def extract(
        self,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
    ) -> ExtractedTextResponse:
        """
        Route an upload to the right reader by extension (or content type).

        Raises:
            UnsupportedFileTypeError: If the file is not text, PDF or image
        """
        suffix = Path(filename or "").suffix.lower()
        content_type = (content_type or "").lower()

        if suffix in PDF_EXTENSIONS or content_type == "application/pdf":
            return ExtractedTextResponse(text=self.read_pdf(data), source="pdf")

        if suffix in IMAGE_EXTENSIONS or content_type.startswith("image/"):
            result = self.ocr_image(data)
            return ExtractedTextResponse(text=result.text, source="image", confidence=result.confidence)

        if suffix in TEXT_EXTENSIONS or content_type.startswith("text/"):
            return ExtractedTextResponse(text=self.read_text_file(data), source="text")

        raise UnsupportedFileTypeError(filename, content_type or None)


# Singleton instance
_text_acquisition_service: Optional[TextAcquisitionService] = None


def get_text_acquisition_service() -> TextAcquisitionService:
    """Get or create TextAcquisitionService instance."""
    global _text_acquisition_service
    if _text_acquisition_service is None:
        _text_acquisition_service = TextAcquisitionService()
    return _text_acquisition_service
