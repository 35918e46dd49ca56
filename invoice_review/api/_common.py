from typing import Optional

from fastapi.responses import JSONResponse

from invoice_review import config
from invoice_review.utils.errors import ERROR_STATUS, ErrorCode

# Review-session error codes (not produced by the extraction core)
NO_ACTIVE_INVOICE = "NO_ACTIVE_INVOICE"
INVALID_EDIT = "INVALID_EDIT"
EXPORT_BLOCKED = "EXPORT_BLOCKED"
UPLOAD_SUPERSEDED = "UPLOAD_SUPERSEDED"

# User-facing wording per locale; the core only ever reports the code.
ERROR_MESSAGES = {
    "en": {
        ErrorCode.NO_FILE.value: "No file was uploaded. Please choose a PDF/JPG file and try again.",
        ErrorCode.NO_API_KEY.value: "Server configuration error (OPENAI_API_KEY). Please contact the administrator.",
        ErrorCode.PDF_PARSE_FAILED.value: "Could not read the PDF. Check the scan quality or upload it as an image.",
        ErrorCode.EXTRACT_FAILED.value: "Extraction service timed out or returned unreadable data. Please upload the document again.",
        NO_ACTIVE_INVOICE: "There is no extracted invoice to review. Upload a document first.",
        INVALID_EDIT: "That field or value cannot be edited.",
        EXPORT_BLOCKED: "Confirm the data (and review the low-confidence fields) before downloading.",
        UPLOAD_SUPERSEDED: "A newer upload replaced this document before its extraction finished.",
    },
    "ko": {
        ErrorCode.NO_FILE.value: "파일이 없습니다. PDF/JPG 파일을 다시 선택해주세요.",
        ErrorCode.NO_API_KEY.value: "서버 설정 오류(OPENAI_API_KEY). 관리자에게 문의하세요.",
        ErrorCode.PDF_PARSE_FAILED.value: "PDF 파싱 실패 - 스캔 품질을 확인하거나 이미지로 다시 업로드해주세요.",
        ErrorCode.EXTRACT_FAILED.value: "API 응답 지연/파싱 실패 - 문서를 다시 업로드해주세요.",
        NO_ACTIVE_INVOICE: "검증할 추출 데이터가 없습니다. 먼저 문서를 업로드해주세요.",
        INVALID_EDIT: "수정할 수 없는 필드 또는 값입니다.",
        EXPORT_BLOCKED: "데이터 승인(및 저신뢰 필드 확인) 후 다운로드할 수 있습니다.",
        UPLOAD_SUPERSEDED: "추출이 끝나기 전에 새 문서가 업로드되어 이 결과는 반영되지 않았습니다.",
    },
}
_FALLBACK = {
    "en": "Something went wrong while processing the request.",
    "ko": "처리 중 오류가 발생했습니다.",
}


def error_message(code: str, locale: Optional[str] = None) -> str:
    locale = locale if locale in ERROR_MESSAGES else config.UI_LOCALE
    if locale not in ERROR_MESSAGES:
        locale = "en"
    return ERROR_MESSAGES[locale].get(code, _FALLBACK[locale])


def error_response(code: str, status_code: Optional[int] = None, detail: Optional[str] = None) -> JSONResponse:
    """Build the {error, error_code} body used by every endpoint."""
    if status_code is None:
        status_code = ERROR_STATUS.get(ErrorCode(code), 500) if code in ErrorCode.__members__ else 500
    message = error_message(code)
    if detail and code == ErrorCode.EXTRACT_FAILED.value:
        message = f"{message} ({detail})"
    return JSONResponse({"error": message, "error_code": code}, status_code=status_code)
