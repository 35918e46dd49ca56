# invoice_review/ai/llm_client.py
import logging
from typing import Any, Dict, List, Optional

from invoice_review import config
from invoice_review.utils.errors import ErrorCode, ExtractionError

logger = logging.getLogger(__name__)


class LLMClient:
    """
    Base extraction client. The 'noop' provider never leaves the process and
    answers every request with an empty JSON object, which the validator turns
    into a blank invoice. Useful for local UI work without credentials.
    """

    def __init__(self, provider: str = "noop", model: Optional[str] = None, timeout: float = 30.0):
        self.provider = provider
        self.model = model or "noop-model"
        self.timeout = timeout

    def complete_json(self, messages: List[Dict[str, Any]], *, temperature: float = 0.0) -> str:
        """Send chat messages and return the raw text of a JSON-object reply."""
        logger.debug("LLM noop response generated for %d message(s)", len(messages))
        return "{}"


def get_llm_client() -> LLMClient:
    """
    Config-driven client selector.
    Raises ExtractionError(NO_API_KEY) when OpenAI is selected without a key.
    """
    provider = (config.LLM_PROVIDER or "openai").lower()
    if provider == "noop":
        return LLMClient(provider="noop")
    if provider == "openai":
        if not config.OPENAI_API_KEY:
            raise ExtractionError(ErrorCode.NO_API_KEY, "OPENAI_API_KEY is not set")
        from invoice_review.ai.openai_client import OpenAIClient
        return OpenAIClient(
            api_key=config.OPENAI_API_KEY,
            base=config.OPENAI_API_BASE,
            model=config.OPENAI_MODEL,
            timeout=config.EXTRACT_TIMEOUT_SECONDS,
        )
    raise NotImplementedError(f"LLM provider '{provider}' not implemented")
