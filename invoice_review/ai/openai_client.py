# invoice_review/ai/openai_client.py
import logging
import time
from typing import Any, Dict, List, Optional

from openai import OpenAI

from invoice_review.ai.llm_client import LLMClient

logger = logging.getLogger(__name__)


class OpenAIClient(LLMClient):
    """Chat-completions client forced into JSON-object output."""

    def __init__(self, api_key: str, base: Optional[str] = None, model: str = "gpt-4o", timeout: float = 60.0):
        super().__init__(provider="openai", model=model, timeout=timeout)
        # one attempt per upload; the user re-uploads to retry
        self._client = OpenAI(api_key=api_key, base_url=base, timeout=timeout, max_retries=0)

    def complete_json(self, messages: List[Dict[str, Any]], *, temperature: float = 0.0) -> str:
        start = time.time()
        resp = self._client.chat.completions.create(
            model=self.model,
            temperature=temperature,
            messages=messages,
            response_format={"type": "json_object"},
        )
        content = resp.choices[0].message.content if resp.choices else None
        logger.info(
            "OpenAI extraction call model=%s elapsed_ms=%d usage=%s",
            self.model,
            int((time.time() - start) * 1000),
            getattr(resp, "usage", None),
        )
        return content or "{}"
