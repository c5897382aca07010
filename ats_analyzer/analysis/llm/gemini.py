"""Google Gemini LLM provider (google-genai SDK) in JSON output mode."""

import logging
import os
from typing import Any

from ats_analyzer.analysis.llm.base import LLMProvider
from ats_analyzer.analysis.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

MAX_OUTPUT_TOKENS = 8192


def _finish_reason(response: Any) -> str | None:
    """Name of the first candidate's finish reason, if the response has one."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return None
    reason = getattr(candidates[0], "finish_reason", None)
    return getattr(reason, "name", None) or (str(reason) if reason is not None else None)


class GeminiProvider(LLMProvider):
    """LLM provider using the Google Gemini API (google-genai SDK)."""

    @property
    def provider_id(self) -> str:
        return "gemini"

    @property
    def default_model(self) -> str:
        return "gemini-2.5-flash"

    @property
    def env_var(self) -> str:
        return "GOOGLE_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("GOOGLE_API_KEY")
        if not api_key:
            msg = "GOOGLE_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            from google import genai
            from google.genai import types as genai_types
        except ImportError:
            msg = (
                "google-genai is required for resume analysis. "
                "Install with: pip install 'ats-analyzer[gemini]'"
            )
            raise ImportError(msg) from None

        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.info("Sending analysis prompt to Gemini API (%s)...", use_model)
        client = genai.Client(api_key=api_key)
        response = client.models.generate_content(
            model=use_model,
            contents=prompt,
            config=genai_types.GenerateContentConfig(
                system_instruction=use_system,
                temperature=0.2,
                max_output_tokens=MAX_OUTPUT_TOKENS,
                response_mime_type="application/json",
            ),
        )

        usage = getattr(response, "usage_metadata", None)
        if usage is not None:
            logger.debug(
                "Gemini usage: %s prompt / %s output tokens",
                getattr(usage, "prompt_token_count", "?"),
                getattr(usage, "candidates_token_count", "?"),
            )

        text = response.text or ""
        if not text.strip():
            # Safety blocks and token exhaustion both surface as an empty text
            msg = f"Gemini returned empty content (finish_reason={_finish_reason(response)})"
            raise ValueError(msg)
        if _finish_reason(response) == "MAX_TOKENS":
            logger.warning(
                "Gemini reply hit the %d token limit, JSON is likely truncated",
                MAX_OUTPUT_TOKENS,
            )
        return text
