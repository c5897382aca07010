"""Anthropic Claude LLM provider.

Claude has no JSON response mode, so the assistant turn is prefilled with the
opening brace of the analysis object and the reply is stitched back onto it.
"""

import logging
import os
from typing import Any

from ats_analyzer.analysis.llm.base import LLMProvider
from ats_analyzer.analysis.prompt import SYSTEM_PROMPT

logger = logging.getLogger(__name__)

JSON_PREFILL = "{"
MAX_OUTPUT_TOKENS = 4096


def _reply_text(message: Any) -> str:
    """Concatenate the text blocks of a Messages API reply."""
    return "".join(block.text for block in message.content if block.type == "text")


class AnthropicProvider(LLMProvider):
    """LLM provider using the Anthropic Claude API with a JSON prefill."""

    @property
    def provider_id(self) -> str:
        return "anthropic"

    @property
    def default_model(self) -> str:
        return "claude-sonnet-4-20250514"

    @property
    def env_var(self) -> str:
        return "ANTHROPIC_API_KEY"

    def complete(
        self,
        prompt: str,
        model: str | None = None,
        *,
        system: str | None = None,
    ) -> str:
        api_key = os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            msg = "ANTHROPIC_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import anthropic
        except ImportError:
            msg = (
                "anthropic is required for resume analysis. "
                "Install with: pip install 'ats-analyzer[anthropic]'"
            )
            raise ImportError(msg) from None

        client = anthropic.Anthropic(api_key=api_key)
        use_model = model or self.default_model
        use_system = system if system is not None else SYSTEM_PROMPT

        logger.info("Sending analysis prompt to Anthropic API (%s)...", use_model)
        message = client.messages.create(
            model=use_model,
            max_tokens=MAX_OUTPUT_TOKENS,
            temperature=0.2,
            system=use_system,
            messages=[
                {"role": "user", "content": prompt},
                {"role": "assistant", "content": JSON_PREFILL},
            ],
        )

        text = _reply_text(message)
        if not text.strip():
            msg = f"Anthropic returned empty content (stop_reason={message.stop_reason})"
            raise ValueError(msg)
        if message.stop_reason == "max_tokens":
            logger.warning(
                "Anthropic reply hit the %d token limit, JSON is likely truncated",
                MAX_OUTPUT_TOKENS,
            )
        return JSON_PREFILL + text
