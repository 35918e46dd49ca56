# invoice_review/agents/extraction.py
"""
Extraction step: upload -> prepared payload -> one LLM call -> validated invoice.

Failures surface as ExtractionError with one of the four upload error codes.
There is no retry and no caching; a new upload is the retry.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from invoice_review.agents.preprocess import prepare_payload
from invoice_review.ai.llm_client import LLMClient, get_llm_client
from invoice_review.models.schemas import InvoiceData, PreparedPayload
from invoice_review.utils.errors import ErrorCode, ExtractionError
from invoice_review.utils.normalize_invoice import normalize_date, validate_invoice

logger = logging.getLogger(__name__)

SCHEMA_PROMPT = """Extract invoice data and return ONLY valid JSON with this exact schema:
{
  "invoice_no": "string",
  "invoice_date": "YYYY-MM-DD",
  "shipper_name": "string",
  "consignee_name": "string",
  "total_amount": number,
  "currency": "string",
  "items": [{"description":"string","quantity":number,"unit_price":number}],
  "confidence_score": number,
  "low_confidence_fields": ["string"]
}"""


def build_messages(payload: PreparedPayload) -> List[Dict[str, Any]]:
    if payload.is_pdf:
        content = f"{SCHEMA_PROMPT}\n\nInvoice text ({max(1, payload.page_count)} pages):\n{payload.text or ''}"
        return [{"role": "user", "content": content}]
    return [
        {
            "role": "user",
            "content": [
                {"type": "text", "text": SCHEMA_PROMPT},
                {"type": "image_url", "image_url": {"url": payload.data_url}},
            ],
        }
    ]


def parse_response(raw: Optional[str]) -> InvoiceData:
    """JSON-decode the reply, validate it, then normalize the validated date."""
    parsed = json.loads(raw or "{}")
    record = validate_invoice(parsed)
    record.invoice_date = normalize_date(record.invoice_date)
    return record


def extract_from_payload(payload: PreparedPayload, llm: LLMClient) -> InvoiceData:
    try:
        raw = llm.complete_json(build_messages(payload), temperature=0.0)
        return parse_response(raw)
    except ExtractionError:
        raise
    except Exception as e:
        logger.exception("Extraction failed for %r via %s", payload.file_name, getattr(llm, "provider", "unknown"))
        raise ExtractionError(ErrorCode.EXTRACT_FAILED, str(e) or type(e).__name__) from e


def run_extraction(
    data: Optional[bytes],
    content_type: Optional[str],
    file_name: Optional[str],
    llm: Optional[LLMClient] = None,
) -> InvoiceData:
    """
    Full upload pipeline. Checks run in order: file present, extractor
    configured, document readable, extraction.
    """
    if not data:
        raise ExtractionError(ErrorCode.NO_FILE, "no file uploaded")

    file_name = file_name or ""
    try:
        if llm is None:
            llm = get_llm_client()
        payload = prepare_payload(data, content_type or "", file_name)
    except ExtractionError:
        raise
    except Exception as e:
        logger.exception("Could not prepare %r for extraction", file_name)
        raise ExtractionError(ErrorCode.EXTRACT_FAILED, str(e) or type(e).__name__) from e

    record = extract_from_payload(payload, llm)
    logger.info(
        "Extracted invoice %r from %r (%s, confidence=%s, low_confidence_fields=%s)",
        record.invoice_no, file_name, payload.kind, record.confidence_score, record.low_confidence_fields,
    )
    return record
