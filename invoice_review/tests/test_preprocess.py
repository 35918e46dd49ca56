# tests/test_preprocess.py
import base64

import pytest

from invoice_review import config
from invoice_review.agents import preprocess
from invoice_review.agents.preprocess import build_page_text, is_pdf, prepare_payload, split_pages
from invoice_review.utils.errors import ErrorCode, ExtractionError


def _stub_pdf_text(monkeypatch, text):
    monkeypatch.setattr(preprocess, "extract_text", lambda fh: text)


@pytest.mark.parametrize("content_type,name,expected", [
    ("application/pdf", "scan.bin", True),
    ("application/octet-stream", "INVOICE.PDF", True),
    ("image/jpeg", "invoice.jpg", False),
    ("", "invoice.png", False),
])
def test_is_pdf(content_type, name, expected):
    assert is_pdf(content_type, name) is expected


def test_split_pages():
    assert split_pages("one\ftwo\f") == ["one", "two"]
    assert split_pages("single page") == ["single page"]
    assert split_pages("") == [""]


def test_build_page_text_limits_pages_and_chars():
    pages = [f"page body {i}" for i in range(15)]
    text = build_page_text(pages, max_pages=10, max_chars=24000)
    assert text.startswith("--- PAGE 1 ---\npage body 0")
    assert "--- PAGE 10 ---" in text
    assert "--- PAGE 11 ---" not in text
    assert "\n\n--- PAGE 2 ---\n" in text
    assert len(build_page_text(["x" * 30000], 10, 24000)) == 24000


def test_pdf_payload(monkeypatch):
    _stub_pdf_text(monkeypatch, "COMMERCIAL INVOICE\nNo. CI-1\fPacking details\f")
    payload = prepare_payload(b"%PDF-1.7", "application/pdf", "ci.pdf")
    assert payload.kind == "pdf"
    assert payload.page_count == 2
    assert payload.text == "--- PAGE 1 ---\nCOMMERCIAL INVOICE\nNo. CI-1\n\n--- PAGE 2 ---\nPacking details"
    assert payload.data_url is None


def test_pdf_respects_configured_limits(monkeypatch):
    monkeypatch.setattr(config, "PDF_MAX_PAGES", 2)
    _stub_pdf_text(monkeypatch, "a\fb\fc\f")
    payload = prepare_payload(b"%PDF", "application/pdf", "ci.pdf")
    assert "--- PAGE 3 ---" not in payload.text
    # the prompt still reports the full page count
    assert payload.page_count == 3


@pytest.mark.parametrize("text", ["", "   \n\t", "\f\f", "  \f \n\f"])
def test_pdf_without_text_fails(monkeypatch, text):
    _stub_pdf_text(monkeypatch, text)
    with pytest.raises(ExtractionError) as exc:
        prepare_payload(b"%PDF", "application/pdf", "scan.pdf")
    assert exc.value.code == ErrorCode.PDF_PARSE_FAILED
    assert exc.value.status_code == 422


def test_image_payload_is_data_url():
    raw = b"\x89PNG\r\n\x1a\nfake"
    payload = prepare_payload(raw, "image/png", "invoice.png")
    assert payload.kind == "image"
    assert payload.text is None
    assert payload.data_url == "data:image/png;base64," + base64.b64encode(raw).decode("ascii")
