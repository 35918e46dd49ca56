# invoice_review/api/extract.py
import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import JSONResponse

from invoice_review.agents.extraction import run_extraction
from invoice_review.api._common import UPLOAD_SUPERSEDED, error_response
from invoice_review.storage.session_store import get_session
from invoice_review.utils.errors import ErrorCode, ExtractionError

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/extract", response_class=JSONResponse)
async def extract_invoice(file: Optional[UploadFile] = File(None)):
    """
    Accept one invoice document (multipart field 'file'), extract it and load
    the result into the review session.

    A new upload resets the session first, so a failed upload leaves it
    EMPTY. If another upload starts while this one is waiting on the
    extractor, this result is dropped and the request answers 409
    UPLOAD_SUPERSEDED.
    """
    data = await file.read() if file is not None else None
    content_type = file.content_type if file is not None else None
    file_name = file.filename if file is not None else None

    session = get_session()
    upload_id = session.begin_upload() if data else None

    try:
        # blocking SDK / pdfminer work runs off the event loop
        record = await asyncio.to_thread(run_extraction, data, content_type, file_name)
    except ExtractionError as e:
        if e.code in (ErrorCode.NO_FILE, ErrorCode.PDF_PARSE_FAILED):
            logger.warning("Upload %r rejected: %s", file_name, e)
        else:
            logger.error("Upload %r failed: %s", file_name, e)
        return error_response(e.code.value, e.status_code, e.detail)

    if not session.load_extraction(record, upload_id):
        logger.warning("Upload %r superseded before its extraction finished", file_name)
        return error_response(UPLOAD_SUPERSEDED, 409)
    return JSONResponse({"data": record.model_dump()})
