# invoice_review/agents/preprocess.py
import base64
import io
import logging
from typing import List

from pdfminer.high_level import extract_text

from invoice_review import config
from invoice_review.models.schemas import PreparedPayload
from invoice_review.utils.errors import ErrorCode, ExtractionError

logger = logging.getLogger(__name__)

PAGE_BREAK = "\f"


def is_pdf(content_type: str, file_name: str) -> bool:
    return "pdf" in (content_type or "").lower() or (file_name or "").lower().endswith(".pdf")


def split_pages(text: str) -> List[str]:
    """Split decoded PDF text on form feeds; a text without page breaks is one page."""
    pages = [p for p in text.split(PAGE_BREAK) if p]
    return pages or [text]


def build_page_text(pages: List[str], max_pages: int, max_chars: int) -> str:
    marked = [f"--- PAGE {i + 1} ---\n{p}" for i, p in enumerate(pages[:max_pages])]
    return "\n\n".join(marked)[:max_chars]


def _prepare_pdf(data: bytes, file_name: str) -> PreparedPayload:
    # pdfminer emits a form feed after every page
    full_text = extract_text(io.BytesIO(data)) or ""
    if not full_text.strip():
        logger.warning("PDF %r has no extractable text layer", file_name)
        raise ExtractionError(ErrorCode.PDF_PARSE_FAILED, "no text layer found")

    pages = split_pages(full_text)
    return PreparedPayload(
        kind="pdf",
        file_name=file_name,
        text=build_page_text(pages, config.PDF_MAX_PAGES, config.PDF_MAX_CHARS),
        page_count=len(pages),
    )


def _prepare_image(data: bytes, content_type: str, file_name: str) -> PreparedPayload:
    b64 = base64.b64encode(data).decode("ascii")
    return PreparedPayload(
        kind="image",
        file_name=file_name,
        data_url=f"data:{content_type};base64,{b64}",
    )


def prepare_payload(data: bytes, content_type: str, file_name: str) -> PreparedPayload:
    """
    Turn an upload into what the extractor is sent:
      - PDFs: page-marked text of the first pages (pdfminer text layer)
      - anything else: the raw bytes as a base64 data URL
    Raises ExtractionError(PDF_PARSE_FAILED) for PDFs without text.
    """
    content_type = content_type or ""
    if is_pdf(content_type, file_name):
        return _prepare_pdf(data, file_name)
    return _prepare_image(data, content_type, file_name)
