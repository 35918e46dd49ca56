# invoice_review/config.py
"""
Environment-driven settings. If a .env file exists it is loaded first so local
development can manage env vars via a file instead of shell. Real environment
variables always win over the file.
"""
import os
from typing import Optional

from dotenv import load_dotenv

# Allow overriding path via ENV_FILE; default to ".env" in project root
_env_file = os.environ.get("ENV_FILE", ".env")
load_dotenv(dotenv_path=_env_file, override=False)

def _getenv(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.environ.get(name)
    if v is None or v == "":
        return default
    return v

def _getint(name: str, default: int) -> int:
    try:
        return int(_getenv(name, str(default)))
    except ValueError:
        return default

def _getfloat(name: str, default: float) -> float:
    try:
        return float(_getenv(name, str(default)))
    except ValueError:
        return default

# Provider selection ("openai" or "noop")
LLM_PROVIDER = _getenv("LLM_PROVIDER", "openai").lower()

# OpenAI
OPENAI_API_KEY = _getenv("OPENAI_API_KEY")
OPENAI_API_BASE = _getenv("OPENAI_API_BASE", "https://api.openai.com/v1")
OPENAI_MODEL = _getenv("OPENAI_MODEL", "gpt-4o")
EXTRACT_TIMEOUT_SECONDS = _getfloat("EXTRACT_TIMEOUT_SECONDS", 60.0)

# PDF text payload limits
PDF_MAX_PAGES = _getint("PDF_MAX_PAGES", 10)
PDF_MAX_CHARS = _getint("PDF_MAX_CHARS", 24000)

# Presentation
UI_LOCALE = _getenv("UI_LOCALE", "en").lower()
CORS_ALLOW_ORIGINS = [o.strip() for o in _getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]

# Logging / deployment
LOG_LEVEL = _getenv("LOG_LEVEL", "INFO").upper()
DEPLOY_ENV = _getenv("DEPLOY_ENV", "development")
