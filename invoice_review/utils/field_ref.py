"""
Typed addressing for editable invoice fields.

Internally a field is either a ScalarField ("total_amount") or an ItemField
(index + name). The string forms "total_amount" / "items[2].quantity" are only
produced or parsed at the API boundary, and are the same identifiers the
extractor uses in low_confidence_fields.
"""
import re
from dataclasses import dataclass
from typing import Union

SCALAR_FIELDS = ("invoice_no", "invoice_date", "shipper_name", "consignee_name", "total_amount", "currency")
ITEM_FIELDS = ("description", "quantity", "unit_price")
NUMERIC_FIELDS = {"total_amount", "quantity", "unit_price"}

_ITEM_RE = re.compile(r"^items\[(\d+)\]\.([a-z_]+)$")


@dataclass(frozen=True)
class ScalarField:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ItemField:
    index: int
    name: str

    def __str__(self) -> str:
        return f"items[{self.index}].{self.name}"


FieldRef = Union[ScalarField, ItemField]


def parse_field_ref(value: Union[str, ScalarField, ItemField]) -> FieldRef:
    """Parse "currency" or "items[0].quantity"; raises ValueError for anything not editable."""
    if isinstance(value, (ScalarField, ItemField)):
        ref = value
    elif isinstance(value, str):
        text = value.strip()
        m = _ITEM_RE.match(text)
        ref = ItemField(int(m.group(1)), m.group(2)) if m else ScalarField(text)
    else:
        raise ValueError(f"field identifier must be a string, got {type(value).__name__}")

    if isinstance(ref, ItemField):
        if ref.name not in ITEM_FIELDS or ref.index < 0:
            raise ValueError(f"unknown item field: {ref}")
    elif ref.name not in SCALAR_FIELDS:
        raise ValueError(f"unknown field: {ref}")
    return ref


def is_numeric(ref: FieldRef) -> bool:
    return ref.name in NUMERIC_FIELDS
