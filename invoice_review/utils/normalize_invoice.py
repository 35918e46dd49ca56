import math
import re
from typing import Any, Dict, List

from invoice_review.models.schemas import InvoiceData, InvoiceItem

_DATE_RE = re.compile(r"(\d{4})[-./](\d{1,2})[-./](\d{1,2})")

_STRING_FIELDS = ("invoice_no", "invoice_date", "shipper_name", "consignee_name", "currency")


def normalize_date(value: Any) -> str:
    """
    Return the first YYYY<sep>M<sep>D found in value as YYYY-MM-DD, or "".
    Separators may be '-', '.' or '/'. Month/day are zero-padded but not
    range-checked.
    """
    if not isinstance(value, str):
        return ""
    m = _DATE_RE.search(value)
    if not m:
        return ""
    y, mo, d = m.groups()
    return f"{y}-{mo.zfill(2)}-{d.zfill(2)}"


def _string(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _number(value: Any, upper: float = math.inf) -> float:
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0.0
    try:
        value = float(value)
    except OverflowError:
        # JSON integers have no size limit
        return 0.0
    if not math.isfinite(value) or value < 0 or value > upper:
        return 0.0
    return value


def _item(raw: Any) -> InvoiceItem:
    if not isinstance(raw, dict):
        # keep the slot so items[i] identifiers still line up
        return InvoiceItem()
    return InvoiceItem(
        description=_string(raw.get("description")),
        quantity=_number(raw.get("quantity")),
        unit_price=_number(raw.get("unit_price")),
    )


def _field_list(raw: Any) -> List[str]:
    if not isinstance(raw, list):
        return []
    seen = []
    for f in raw:
        if isinstance(f, str) and f not in seen:
            seen.append(f)
    return seen


def validate_invoice(raw: Any) -> InvoiceData:
    """
    Coerce untrusted extractor output into an InvoiceData.

    Never raises. Every field is checked on its own and falls back to its
    default ("" / 0 / []) when missing, of the wrong type, or out of range.
    Out-of-range numbers are replaced, not clamped, so a 0 confidence score
    still signals that the extractor returned something unusable.
    """
    if not isinstance(raw, dict):
        raw = {}

    clean: Dict[str, Any] = {f: _string(raw.get(f)) for f in _STRING_FIELDS}
    clean["total_amount"] = _number(raw.get("total_amount"))
    clean["confidence_score"] = _number(raw.get("confidence_score"), upper=100.0)

    items = raw.get("items")
    clean["items"] = [_item(it) for it in items] if isinstance(items, list) else []
    clean["low_confidence_fields"] = _field_list(raw.get("low_confidence_fields"))

    return InvoiceData(**clean)
