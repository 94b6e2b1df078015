"""
Unit tests for TextAcquisitionService and OcrSession.

No real PDFs, images or network: pdfplumber, the OCR engine and the
HTTP session are all replaced with fakes.

Run: pytest tests/unit/test_text_acquisition_service.py -v
"""

import pytest
import requests
from unittest.mock import MagicMock, patch

from config.settings import settings
from exceptions import (
    ProxyNotConfiguredError,
    TextExtractionError,
    UnsupportedFileTypeError,
)
from models.smart_paste import OcrText
from services.text_acquisition_service import (
    OcrSession,
    TextAcquisitionService,
    clean_ocr_text,
    get_text_acquisition_service,
)


PROXY_URL = "https://proxy.example.com/fetch-product-page"


def _word(text, x0, x1, top):
    return {"text": text, "x0": x0, "x1": x1, "top": top}


class FakePage:
    def __init__(self, words):
        self._words = words

    def extract_words(self, **kwargs):
        return self._words


class FakePdf:
    def __init__(self, pages):
        self.pages = pages

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False


@pytest.fixture
def service():
    return TextAcquisitionService(http_session=MagicMock())


# ===================
# TEXT FILES
# ===================

class TestReadTextFile:
    """Tests for read_text_file()"""

    def test_utf8_with_bom(self, service):
        """A UTF-8 BOM should be dropped."""
        data = "\ufeffWeight: 1 kg".encode("utf-8")

        assert service.read_text_file(data) == "Weight: 1 kg"

    def test_latin1_fallback(self, service):
        """Bytes that are not UTF-8 should decode as Latin-1."""
        data = "Temperatur: 40 °C".encode("latin-1")

        assert service.read_text_file(data) == "Temperatur: 40 °C"

    def test_empty(self, service):
        """Empty uploads should give ''."""
        assert service.read_text_file(b"") == ""


# ===================
# OCR
# ===================

class TestCleanOcrText:
    """Tests for clean_ocr_text()"""

    def test_pipe_and_lowercase_l(self):
        """Pipes and l between capitals should become I."""
        assert clean_ocr_text("MlC | ok") == "MIC I ok"

    def test_trailing_l_untouched(self):
        """An l not surrounded by capitals or digits should stay."""
        assert clean_ocr_text("MODEl") == "MODEl"

    def test_newlines_collapsed(self):
        """Runs of blank lines should collapse to one blank line."""
        assert clean_ocr_text("Weight\n\n\n\nColor") == "Weight\n\nColor"

    def test_whitespace_lines_emptied(self):
        """Whitespace-only lines should be emptied."""
        assert clean_ocr_text("Weight\n   \nColor") == "Weight\n\nColor"


class TestOcrSession:
    """Tests for OcrSession"""

    def test_recognize_image(self):
        """Text should be cleaned and confidence averaged over valid words."""
        session = OcrSession()
        engine = MagicMock()
        engine.image_to_data.return_value = {"conf": ["90", "-1", "80"]}
        engine.image_to_string.return_value = "MlC | ok"
        session._engine = engine

        result = session.recognize_image(MagicMock())

        assert result.text == "MIC I ok"
        assert result.confidence == 85.0

    def test_no_valid_confidences(self):
        """No valid word confidences should give 0."""
        session = OcrSession()
        engine = MagicMock()
        engine.image_to_data.return_value = {"conf": ["-1"]}
        engine.image_to_string.return_value = ""
        session._engine = engine

        result = session.recognize_image(MagicMock())

        assert result == OcrText()

    def test_engine_failure(self):
        """Engine errors should surface as TextExtractionError."""
        session = OcrSession()
        engine = MagicMock()
        engine.image_to_data.side_effect = RuntimeError("tesseract not found")
        session._engine = engine

        with pytest.raises(TextExtractionError):
            session.recognize_image(MagicMock())

    def test_context_manager_closes(self):
        """Leaving the with-block should close the session."""
        with OcrSession() as session:
            session._engine = MagicMock()
            assert session.started

        assert session.closed
        assert not session.started

    def test_closed_session_refuses_work(self):
        """A closed session should not restart."""
        session = OcrSession()
        session.close()

        with pytest.raises(TextExtractionError):
            session.recognize(b"\x89PNG")

    def test_default_language(self):
        """Language should default to the configured one."""
        assert OcrSession().language == settings.ocr_language
        assert OcrSession("deu").language == "deu"


class TestOcrImage:
    """Tests for ocr_image() / read_image()"""

    def test_disabled(self, service):
        """With OCR off, images should give an empty result."""
        with patch.object(settings, "enable_ocr", False):
            assert service.ocr_image(b"\x89PNG") == OcrText()

    def test_empty_data(self, service):
        """Empty bytes should give an empty result."""
        with patch.object(settings, "enable_ocr", True):
            assert service.ocr_image(b"") == OcrText()

    def test_uses_given_session(self, service):
        """A caller session should be used and left open."""
        session = MagicMock()
        session.recognize.return_value = OcrText(text="Weight: 1 kg", confidence=91.5)

        with patch.object(settings, "enable_ocr", True):
            text = service.read_image(b"\x89PNG", session)

        assert text == "Weight: 1 kg"
        session.recognize.assert_called_once_with(b"\x89PNG")
        session.close.assert_not_called()

    def test_failure_gives_empty(self, service):
        """OCR failures should degrade to an empty result."""
        session = MagicMock()
        session.recognize.side_effect = TextExtractionError("image", "Image could not be opened")

        with patch.object(settings, "enable_ocr", True):
            assert service.ocr_image(b"not an image", session) == OcrText()


# ===================
# PDF
# ===================

class TestPageLines:
    """Tests for TextAcquisitionService._page_lines()"""

    def test_groups_words_into_lines(self):
        """Words on nearly the same top should share a line; wide gaps become tabs."""
        page = FakePage([
            _word("Sensor", 10, 50, 120.0),
            _word("Weight", 10, 50, 99.0),
            _word("kg", 138, 150, 100.0),
            _word("1.2", 120, 135, 99.5),
        ])

        assert TextAcquisitionService._page_lines(page) == ["Weight\t1.2 kg", "Sensor"]

    def test_blank_words_skipped(self):
        """Whitespace-only words should be ignored."""
        page = FakePage([_word(" ", 10, 12, 10.0), _word("ISO", 20, 40, 10.0)])

        assert TextAcquisitionService._page_lines(page) == ["ISO"]


class TestReadPdf:
    """Tests for read_pdf()"""

    def test_pages_joined_with_blank_line(self, service):
        """Each page's lines should be separated from the next by a blank line."""
        pdf = FakePdf([
            FakePage([_word("Sensor", 10, 50, 10.0), _word("CMOS", 100, 140, 10.0)]),
            FakePage([_word("Weight", 10, 50, 10.0), _word("658", 100, 120, 10.0), _word("g", 122, 128, 10.0)]),
        ])

        with patch("services.text_acquisition_service.pdfplumber.open", return_value=pdf):
            text = service.read_pdf(b"%PDF-1.7")

        assert text == "Sensor\tCMOS\n\nWeight\t658 g"

    def test_page_limit(self, service):
        """Only the configured number of pages should be read."""
        pdf = FakePdf([FakePage([_word(f"Page{i}", 10, 50, 10.0)]) for i in range(3)])

        with patch("services.text_acquisition_service.pdfplumber.open", return_value=pdf):
            with patch.object(settings, "max_pdf_pages", 2):
                text = service.read_pdf(b"%PDF-1.7")

        assert text == "Page0\n\nPage1"

    def test_unreadable_pdf(self, service):
        """A PDF that cannot be opened should give ''."""
        with patch(
            "services.text_acquisition_service.pdfplumber.open",
            side_effect=Exception("No /Root object")
        ):
            assert service.read_pdf(b"garbage") == ""

    def test_empty_data(self, service):
        """Empty bytes should give ''."""
        assert service.read_pdf(b"") == ""

    def test_short_text_without_ocr(self, service):
        """With OCR off, a thin text layer is returned as-is."""
        pdf = FakePdf([FakePage([_word("Scan", 10, 50, 10.0)])])

        with patch("services.text_acquisition_service.pdfplumber.open", return_value=pdf):
            with patch.object(settings, "enable_ocr", False):
                with patch.object(TextAcquisitionService, "_ocr_pdf") as ocr_pdf:
                    text = service.read_pdf(b"%PDF-1.7")

        assert text == "Scan"
        ocr_pdf.assert_not_called()

    def test_short_text_uses_ocr(self, service):
        """With OCR on, a scanned PDF should use the longer OCR text."""
        pdf = FakePdf([FakePage([_word("Scan", 10, 50, 10.0)])])
        ocr_text = "Sensor Type: Full Frame CMOS\nWeight: 658 g"

        with patch("services.text_acquisition_service.pdfplumber.open", return_value=pdf):
            with patch.object(settings, "enable_ocr", True):
                with patch.object(TextAcquisitionService, "_ocr_pdf", return_value=ocr_text):
                    text = service.read_pdf(b"%PDF-1.7")

        assert text == ocr_text

    def test_ocr_failure_keeps_text_layer(self, service):
        """If OCR fails, the text layer should be kept."""
        pdf = FakePdf([FakePage([_word("Scan", 10, 50, 10.0)])])

        with patch("services.text_acquisition_service.pdfplumber.open", return_value=pdf):
            with patch.object(settings, "enable_ocr", True):
                with patch.object(
                    TextAcquisitionService,
                    "_ocr_pdf",
                    side_effect=TextExtractionError("pdf", "pdf2image not installed")
                ):
                    text = service.read_pdf(b"%PDF-1.7")

        assert text == "Scan"


# ===================
# PRODUCT PAGES
# ===================

class TestFetchProductPage:
    """Tests for fetch_product_page()"""

    def test_proxy_not_configured(self, service):
        """Without a proxy URL, fetching should raise."""
        with patch.object(settings, "product_page_proxy_url", None):
            with pytest.raises(ProxyNotConfiguredError) as exc_info:
                service.fetch_product_page("https://shop.example.com/a7iv")

        assert exc_info.value.code == "PROXY_NOT_CONFIGURED"

    def test_success(self, service):
        """The proxy response should be returned as a FetchedPage."""
        service.http.post.return_value.json.return_value = {
            "text": "Weight: 658 g",
            "html": "<p>Weight: 658 g</p>",
        }

        with patch.object(settings, "product_page_proxy_url", PROXY_URL):
            page = service.fetch_product_page("https://shop.example.com/a7iv")

        assert page.text == "Weight: 658 g"
        assert page.html == "<p>Weight: 658 g</p>"
        assert page.source_url == "https://shop.example.com/a7iv"
        service.http.post.assert_called_once_with(
            PROXY_URL,
            json={"url": "https://shop.example.com/a7iv"},
            timeout=settings.http_timeout_seconds,
        )

    def test_connection_error(self, service):
        """A network failure should give an empty page."""
        service.http.post.side_effect = requests.exceptions.ConnectionError("down")

        with patch.object(settings, "product_page_proxy_url", PROXY_URL):
            page = service.fetch_product_page("https://shop.example.com/a7iv")

        assert page.text == ""
        assert page.source_url == "https://shop.example.com/a7iv"

    def test_http_error(self, service):
        """A non-2xx proxy response should give an empty page."""
        service.http.post.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError("502")

        with patch.object(settings, "product_page_proxy_url", PROXY_URL):
            page = service.fetch_product_page("https://shop.example.com/a7iv")

        assert page.text == ""
        assert page.html == ""

    def test_invalid_json(self, service):
        """A body that is not JSON should give an empty page."""
        service.http.post.return_value.json.side_effect = ValueError("Expecting value")

        with patch.object(settings, "product_page_proxy_url", PROXY_URL):
            page = service.fetch_product_page("https://shop.example.com/a7iv")

        assert page.text == ""

    def test_non_object_payload(self, service):
        """A JSON body that is not an object should give an empty page."""
        service.http.post.return_value.json.return_value = ["Weight: 658 g"]

        with patch.object(settings, "product_page_proxy_url", PROXY_URL):
            page = service.fetch_product_page("https://shop.example.com/a7iv")

        assert page.text == ""


# ===================
# UPLOAD DISPATCH
# ===================

class TestExtract:
    """Tests for extract()"""

    def test_text_file(self, service):
        """Text extensions should be decoded."""
        result = service.extract("specs.txt", b"Weight: 1 kg")

        assert result.text == "Weight: 1 kg"
        assert result.source == "text"
        assert result.confidence is None

    def test_text_content_type(self, service):
        """A text/* content type should be enough without an extension."""
        result = service.extract("upload", b"Weight: 1 kg", "text/plain")

        assert result.source == "text"

    def test_pdf(self, service):
        """PDFs should go through read_pdf."""
        with patch.object(service, "read_pdf", return_value="Weight\t1 kg") as read_pdf:
            result = service.extract("Manual.PDF", b"%PDF-1.7")

        assert result.text == "Weight\t1 kg"
        assert result.source == "pdf"
        read_pdf.assert_called_once_with(b"%PDF-1.7")

    def test_image(self, service):
        """Images should go through OCR and report confidence."""
        with patch.object(service, "ocr_image", return_value=OcrText(text="ISO 100", confidence=88.2)):
            result = service.extract("label.jpg", b"\xff\xd8")

        assert result.text == "ISO 100"
        assert result.source == "image"
        assert result.confidence == 88.2

    def test_unsupported(self, service):
        """Other files should be rejected."""
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            service.extract("specs.docx", b"PK\x03\x04")

        assert exc_info.value.code == "UNSUPPORTED_FILE_TYPE"
        assert exc_info.value.status_code == 422


class TestServiceSingleton:
    """Tests for get_text_acquisition_service()"""

    def test_singleton(self):
        """Should return the same instance."""
        assert get_text_acquisition_service() is get_text_acquisition_service()
