# invoice_review/api/review.py
import asyncio
import logging
from typing import Any

from fastapi import APIRouter
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel

from invoice_review.agents.export import EXPORT_FILENAME, assemble_export, build_workbook
from invoice_review.api._common import EXPORT_BLOCKED, INVALID_EDIT, NO_ACTIVE_INVOICE, error_response
from invoice_review.storage.session_store import get_session
from invoice_review.utils.errors import InvalidTransition

logger = logging.getLogger(__name__)

router = APIRouter()

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class FieldEdit(BaseModel):
    field: str
    value: Any = None


class ConfirmBody(BaseModel):
    confirmed: bool


class ReviewedBody(BaseModel):
    reviewed: bool


@router.get("/session", response_class=JSONResponse)
async def get_review_session():
    return JSONResponse(get_session().to_dict())


@router.patch("/session/fields", response_class=JSONResponse)
async def edit_field(body: FieldEdit):
    """
    Edit one field, e.g. {"field": "items[0].quantity", "value": 12}.
    Returns the audit entry written (null when the value did not change).
    """
    session = get_session()
    try:
        entry = session.edit_field(body.field, body.value)
    except InvalidTransition:
        return error_response(NO_ACTIVE_INVOICE, 409)
    except IndexError as e:
        logger.info("edit rejected: %s", e)
        return error_response(INVALID_EDIT, 404)
    except ValueError as e:
        logger.info("edit rejected: %s", e)
        return error_response(INVALID_EDIT, 422)

    return JSONResponse({
        "audit": entry.model_dump() if entry else None,
        "session": session.to_dict(),
    })


@router.post("/session/confirm", response_class=JSONResponse)
async def confirm(body: ConfirmBody):
    session = get_session()
    try:
        session.set_confirmed(body.confirmed)
    except InvalidTransition:
        return error_response(NO_ACTIVE_INVOICE, 409)
    return JSONResponse(session.to_dict())


@router.post("/session/low-confidence-reviewed", response_class=JSONResponse)
async def low_confidence_reviewed(body: ReviewedBody):
    session = get_session()
    try:
        session.set_low_confidence_reviewed(body.reviewed)
    except InvalidTransition:
        return error_response(NO_ACTIVE_INVOICE, 409)
    return JSONResponse(session.to_dict())


@router.get("/session/export")
async def export_workbook():
    """Download the verified invoice as invoice_verified.xlsx once the export gate is open."""
    session = get_session()
    if not session.exportable:
        return error_response(EXPORT_BLOCKED, 409)

    rows = assemble_export(session)
    content = await asyncio.to_thread(build_workbook, rows)
    logger.info("Exported invoice %r with %d audit entries", session.record.invoice_no, len(session.audit_log))
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
    )
