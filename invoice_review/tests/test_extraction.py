# tests/test_extraction.py
import json

import pytest

from invoice_review import config
from invoice_review.agents import preprocess
from invoice_review.agents.extraction import SCHEMA_PROMPT, run_extraction
from invoice_review.utils.errors import ErrorCode, ExtractionError

REPLY = {
    "invoice_no": "CI-2024-0412",
    "invoice_date": "Issued 2024/4/2",
    "shipper_name": "Hanbit Precision",
    "consignee_name": "Northwind GmbH",
    "total_amount": 1500,
    "currency": "USD",
    "items": [{"description": "Housing", "quantity": 10, "unit_price": 150}],
    "confidence_score": 91,
    "low_confidence_fields": [],
}


def test_image_extraction_builds_multimodal_request(fake_llm):
    llm = fake_llm(json.dumps(REPLY))
    rec = run_extraction(b"jpegbytes", "image/jpeg", "ci.jpg", llm=llm)

    assert rec.invoice_no == "CI-2024-0412"
    assert rec.invoice_date == "2024-04-02"
    assert rec.items[0].unit_price == 150

    call = llm.calls[0]
    assert call["temperature"] == 0.0
    content = call["messages"][0]["content"]
    assert content[0] == {"type": "text", "text": SCHEMA_PROMPT}
    assert content[1]["image_url"]["url"].startswith("data:image/jpeg;base64,")


def test_pdf_extraction_sends_page_text(monkeypatch, fake_llm):
    monkeypatch.setattr(preprocess, "extract_text", lambda fh: "INVOICE CI-9\f")
    llm = fake_llm(json.dumps(REPLY))
    run_extraction(b"%PDF", "application/pdf", "ci.pdf", llm=llm)

    content = llm.calls[0]["messages"][0]["content"]
    assert content.startswith(SCHEMA_PROMPT)
    assert "Invoice text (1 pages):\n--- PAGE 1 ---\nINVOICE CI-9" in content


def test_missing_date_normalizes_to_empty(fake_llm):
    rec = run_extraction(b"img", "image/png", "a.png", llm=fake_llm(json.dumps({"invoice_no": "X"})))
    assert rec.invoice_date == ""
    assert rec.total_amount == 0


def test_empty_reply_is_blank_record(fake_llm):
    rec = run_extraction(b"img", "image/png", "a.png", llm=fake_llm(""))
    assert rec.invoice_no == ""


def test_no_file(fake_llm):
    llm = fake_llm()
    for data in (None, b""):
        with pytest.raises(ExtractionError) as exc:
            run_extraction(data, "application/pdf", "a.pdf", llm=llm)
        assert exc.value.code == ErrorCode.NO_FILE
    assert llm.calls == []


def test_no_api_key_checked_before_parsing(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_API_KEY", None)
    monkeypatch.setattr(preprocess, "extract_text", lambda fh: "")
    with pytest.raises(ExtractionError) as exc:
        run_extraction(b"%PDF", "application/pdf", "a.pdf")
    assert exc.value.code == ErrorCode.NO_API_KEY


def test_invalid_json_is_extract_failed(fake_llm):
    with pytest.raises(ExtractionError) as exc:
        run_extraction(b"img", "image/png", "a.png", llm=fake_llm("not json at all"))
    assert exc.value.code == ErrorCode.EXTRACT_FAILED
    assert exc.value.status_code == 500


def test_transport_error_is_extract_failed(fake_llm):
    with pytest.raises(ExtractionError) as exc:
        run_extraction(b"img", "image/png", "a.png", llm=fake_llm(exc=TimeoutError("read timed out")))
    assert exc.value.code == ErrorCode.EXTRACT_FAILED
    assert "read timed out" in exc.value.detail


def test_pdf_decoder_crash_is_extract_failed(monkeypatch, fake_llm):
    def boom(fh):
        raise ValueError("broken xref table")
    monkeypatch.setattr(preprocess, "extract_text", boom)
    with pytest.raises(ExtractionError) as exc:
        run_extraction(b"%PDF", "application/pdf", "a.pdf", llm=fake_llm())
    assert exc.value.code == ErrorCode.EXTRACT_FAILED
