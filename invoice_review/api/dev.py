# invoice_review/api/dev.py
import json
from pathlib import Path

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from invoice_review.storage.session_store import get_session
from invoice_review.utils.normalize_invoice import validate_invoice

router = APIRouter()

FIXTURES_DIR = Path(__file__).resolve().parent.parent / "fixtures"
MOCK_FIXTURES = {
    "high": "sample_invoice_high_confidence.json",
    "low": "sample_invoice_low_confidence.json",
}


def _load_mock(mode: str):
    """Return (mode, fixture dict); anything other than 'low' means 'high'."""
    mode = "low" if mode == "low" else "high"
    with open(FIXTURES_DIR / MOCK_FIXTURES[mode], encoding="utf-8") as fh:
        return mode, json.load(fh)


@router.get("/mock", response_class=JSONResponse)
async def mock_extract(mode: str = Query("high")):
    """
    Canned extraction result for UI development, no AI call involved.
    - mode=high -> clean invoice, no low-confidence fields
    - mode=low  -> invoice with low-confidence fields flagged
    """
    mode, data = _load_mock(mode)
    return JSONResponse({"data": data, "source": f"mock-{mode}"})


@router.post("/dev/session/load-mock", response_class=JSONResponse)
async def load_mock_into_session(mode: str = Query("high")):
    """Dev helper: start a review session from a fixture as if it had just been extracted."""
    mode, data = _load_mock(mode)
    session = get_session()
    upload_id = session.begin_upload()
    session.load_extraction(validate_invoice(data), upload_id)
    return JSONResponse({"source": f"mock-{mode}", "session": session.to_dict()})
