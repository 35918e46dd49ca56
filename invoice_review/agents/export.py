# invoice_review/agents/export.py
import io
from datetime import datetime, timezone
from typing import Any, Dict, List, NamedTuple, Optional

import pandas as pd

from invoice_review.utils.state import ReviewSession

EXPORT_FILENAME = "invoice_verified.xlsx"
AUDIT_MARKER = "AUDIT"

ITEM_COLUMNS = ["description", "quantity", "unit_price"]
METADATA_COLUMNS = ["exported_at", "confirmed", "low_confidence_reviewed", "confidence_score"]


class ExportRows(NamedTuple):
    summary_row: Dict[str, Any]
    item_rows: List[Dict[str, Any]]
    metadata_rows: List[Dict[str, Any]]


def _yn(flag: bool) -> str:
    return "Y" if flag else "N"


def assemble_export(session: ReviewSession, exported_at: Optional[str] = None) -> ExportRows:
    """
    Flatten the reviewed invoice into the three export tables.

    The metadata table starts with one row describing the export itself, then
    one row per audit entry laid out as
    (timestamp, "AUDIT", field, "old -> new") in the same four columns.
    Callers are expected to have checked session.exportable already.
    """
    record = session.record
    exported_at = exported_at or datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")

    summary_row = {
        "invoice_no": record.invoice_no,
        "invoice_date": record.invoice_date,
        "shipper_name": record.shipper_name,
        "consignee_name": record.consignee_name,
        "total_amount": record.total_amount,
        "currency": record.currency,
        "confidence_score": record.confidence_score,
        "low_confidence_fields": ", ".join(record.low_confidence_fields),
    }

    item_rows = [
        {"description": it.description, "quantity": it.quantity, "unit_price": it.unit_price}
        for it in record.items
    ]

    metadata_rows = [
        {
            "exported_at": exported_at,
            "confirmed": _yn(session.confirmed),
            "low_confidence_reviewed": _yn(session.low_confidence_reviewed),
            "confidence_score": record.confidence_score,
        }
    ]
    for entry in session.audit_log:
        metadata_rows.append({
            "exported_at": entry.timestamp,
            "confirmed": AUDIT_MARKER,
            "low_confidence_reviewed": entry.field,
            "confidence_score": f"{entry.old_value} -> {entry.new_value}",
        })

    return ExportRows(summary_row, item_rows, metadata_rows)


def build_workbook(rows: ExportRows) -> bytes:
    """Write the export tables to an .xlsx workbook (sheets: invoice, items, metadata)."""
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        pd.DataFrame([rows.summary_row]).to_excel(writer, index=False, sheet_name="invoice")
        pd.DataFrame(rows.item_rows, columns=ITEM_COLUMNS).to_excel(writer, index=False, sheet_name="items")
        pd.DataFrame(rows.metadata_rows, columns=METADATA_COLUMNS).to_excel(writer, index=False, sheet_name="metadata")
    output.seek(0)
    return output.getvalue()
