from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class InvoiceItem(BaseModel):
    model_config = ConfigDict(validate_assignment=True)

    description: str = ""
    quantity: float = Field(default=0.0, ge=0)
    unit_price: float = Field(default=0.0, ge=0)


class InvoiceData(BaseModel):
    """Canonical invoice record produced by extraction and edited during review."""
    model_config = ConfigDict(validate_assignment=True)

    invoice_no: str = ""
    invoice_date: str = ""  # YYYY-MM-DD or "" when unknown
    shipper_name: str = ""
    consignee_name: str = ""
    total_amount: float = Field(default=0.0, ge=0)
    currency: str = ""
    items: List[InvoiceItem] = Field(default_factory=list)
    confidence_score: float = Field(default=0.0, ge=0, le=100)
    low_confidence_fields: List[str] = Field(default_factory=list)


class AuditEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    field: str
    old_value: str
    new_value: str


class PreparedPayload(BaseModel):
    kind: str  # "pdf" or "image"
    file_name: str = ""
    text: Optional[str] = None
    page_count: int = 0
    data_url: Optional[str] = None

    @property
    def is_pdf(self) -> bool:
        return self.kind == "pdf"
