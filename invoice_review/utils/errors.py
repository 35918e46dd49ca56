# invoice_review/utils/errors.py
from enum import Enum
from typing import Optional


class ErrorCode(str, Enum):
    NO_FILE = "NO_FILE"
    NO_API_KEY = "NO_API_KEY"
    PDF_PARSE_FAILED = "PDF_PARSE_FAILED"
    EXTRACT_FAILED = "EXTRACT_FAILED"


# HTTP status for each terminal upload failure
ERROR_STATUS = {
    ErrorCode.NO_FILE: 400,
    ErrorCode.NO_API_KEY: 500,
    ErrorCode.PDF_PARSE_FAILED: 422,
    ErrorCode.EXTRACT_FAILED: 500,
}


class ExtractionError(Exception):
    """
    Raised by the extraction pipeline. Carries only the machine error code and
    a technical detail; user-facing wording is chosen by the API layer.
    """

    def __init__(self, code: ErrorCode, detail: Optional[str] = None):
        self.code = ErrorCode(code)
        self.detail = detail or ""
        super().__init__(f"{self.code.value}: {self.detail}" if self.detail else self.code.value)

    @property
    def status_code(self) -> int:
        return ERROR_STATUS[self.code]


class InvalidTransition(ValueError):
    """Review session operation not allowed in the current status."""
