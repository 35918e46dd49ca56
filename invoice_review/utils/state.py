import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from invoice_review.models.schemas import AuditEntry, InvoiceData
from invoice_review.utils.errors import InvalidTransition
from invoice_review.utils.field_ref import FieldRef, ItemField, is_numeric, parse_field_ref

logger = logging.getLogger(__name__)

# Canonical review statuses (use these strings across the app)
EMPTY = "EMPTY"
EXTRACTED = "EXTRACTED"
UNDER_REVIEW = "UNDER_REVIEW"
CONFIRMED = "CONFIRMED"
# reported by ReviewSession.state only; never stored
CONFIRMED_EXPORTABLE = "CONFIRMED_EXPORTABLE"

ALLOWED_STATUSES = [EMPTY, EXTRACTED, UNDER_REVIEW, CONFIRMED]

# Status transition rules for user-driven operations (source -> allowed targets).
# Loading a new extraction and starting a new upload are allowed from anywhere.
STATUS_TRANSITIONS = {
    EMPTY: set(),
    EXTRACTED: {UNDER_REVIEW, CONFIRMED},
    UNDER_REVIEW: {CONFIRMED},
    CONFIRMED: {UNDER_REVIEW},
}


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def stringify(value: Any) -> str:
    """String form used for audit comparison; integral floats print without '.0'."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _coerce(ref: FieldRef, value: Any) -> Union[str, float]:
    if not is_numeric(ref):
        return stringify(value)
    if value is None or value == "":
        return 0.0
    if isinstance(value, bool):
        raise ValueError(f"{ref} expects a number")
    try:
        number = float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"{ref} expects a number, got {value!r}")
    if not math.isfinite(number) or number < 0:
        raise ValueError(f"{ref} must be a non-negative number")
    return number


class ReviewSession:
    """
    Human review state for the single active invoice.

    Owns the record, the append-only audit log and the two export-gate flags.
    All mutation goes through the named operations below.
    """

    def __init__(self):
        self.record = InvoiceData()
        self.audit_log: List[AuditEntry] = []
        self.confirmed = False
        self.low_confidence_reviewed = False
        # set when an edit undid a confirmation; cleared by the next set_confirmed
        self.confirmation_revoked = False
        self.status = EMPTY
        self.upload_id = 0

    # ------------------------------
    # lifecycle
    # ------------------------------
    def _reset(self, record: InvoiceData, status: str):
        self.record = record
        self.audit_log = []
        self.confirmed = False
        self.low_confidence_reviewed = False
        self.confirmation_revoked = False
        self.status = status

    def begin_upload(self) -> int:
        """Drop any current invoice and return the token for the new upload."""
        self.upload_id += 1
        self._reset(InvoiceData(), EMPTY)
        logger.debug("review session reset for upload %s", self.upload_id)
        return self.upload_id

    def load_extraction(self, record: InvoiceData, upload_id: Optional[int] = None) -> bool:
        """
        Replace the record wholesale with a fresh extraction. Returns False (and
        changes nothing) when upload_id belongs to an upload superseded since.
        """
        if upload_id is not None and upload_id != self.upload_id:
            logger.info("discarding extraction for superseded upload %s (current %s)", upload_id, self.upload_id)
            return False
        self._reset(record.model_copy(deep=True), EXTRACTED)
        logger.debug("review session loaded invoice %r", record.invoice_no)
        return True

    def _transition(self, target: str):
        if target == self.status:
            return
        if target not in STATUS_TRANSITIONS.get(self.status, set()):
            raise InvalidTransition(f"cannot move from {self.status} to {target}")
        logger.debug("review status %s -> %s", self.status, target)
        self.status = target

    def _require_record(self):
        if self.status == EMPTY:
            raise InvalidTransition("no extracted invoice to review")

    # ------------------------------
    # user operations
    # ------------------------------
    def edit_field(self, field: Union[str, FieldRef], value: Any) -> Optional[AuditEntry]:
        """
        Apply one user edit. Returns the new AuditEntry, or None when the value
        is unchanged (nothing is logged or modified in that case).
        """
        self._require_record()
        ref = parse_field_ref(field)
        new_value = _coerce(ref, value)

        if isinstance(ref, ItemField):
            if ref.index >= len(self.record.items):
                raise IndexError(f"no line item at index {ref.index}")
            target = self.record.items[ref.index]
        else:
            target = self.record

        old_str = stringify(getattr(target, ref.name))
        new_str = stringify(new_value)
        if old_str == new_str:
            return None

        setattr(target, ref.name, new_value)
        entry = AuditEntry(timestamp=_now_iso(), field=str(ref), old_value=old_str, new_value=new_str)
        self.audit_log.append(entry)

        if self.confirmed:
            # approval covered the previous values only
            self.confirmed = False
            self.confirmation_revoked = True
            logger.info("edit of %s revoked the confirmation", ref)
        self._transition(UNDER_REVIEW)
        return entry

    def set_confirmed(self, confirmed: bool):
        self._require_record()
        if confirmed:
            self._transition(CONFIRMED)
        elif self.status == CONFIRMED:
            self._transition(UNDER_REVIEW)
        self.confirmed = bool(confirmed)
        self.confirmation_revoked = False

    def set_low_confidence_reviewed(self, reviewed: bool):
        self._require_record()
        self.low_confidence_reviewed = bool(reviewed)

    # ------------------------------
    # derived state
    # ------------------------------
    @property
    def requires_low_confidence_review(self) -> bool:
        return len(self.record.low_confidence_fields) > 0

    @property
    def exportable(self) -> bool:
        return self.confirmed and (not self.requires_low_confidence_review or self.low_confidence_reviewed)

    @property
    def state(self) -> str:
        if self.status == CONFIRMED and self.exportable:
            return CONFIRMED_EXPORTABLE
        return self.status

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "state": self.state,
            "data": self.record.model_dump(),
            "confirmed": self.confirmed,
            "confirmation_revoked": self.confirmation_revoked,
            "low_confidence_reviewed": self.low_confidence_reviewed,
            "requires_low_confidence_review": self.requires_low_confidence_review,
            "exportable": self.exportable,
            "audit_log": [e.model_dump() for e in self.audit_log],
        }
