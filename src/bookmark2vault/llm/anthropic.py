"""Claude/Anthropic LLM provider."""

from typing import Optional

import anthropic

from ..exceptions import LLMError
from .base import LLMProvider

# Categorization replies are a few hundred tokens at most
_DEFAULT_MAX_OUTPUT = 1_024


class AnthropicProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str = "claude-haiku-4-5",
        timeout: float = 30.0,
    ):
        # The SDK's own retries would stack on top of the analyzer's backoff
        self._client = anthropic.Anthropic(
            api_key=api_key, timeout=timeout, max_retries=0
        )
        self._model = model

    @property
    def default_max_output_tokens(self) -> int:
        return _DEFAULT_MAX_OUTPUT

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        try:
            response = self._client.messages.create(
                model=self._model,
                max_tokens=max_output_tokens or _DEFAULT_MAX_OUTPUT,
                system=system_prompt,
                messages=[{"role": "user", "content": user_prompt}],
            )
        except anthropic.APIError as e:
            raise LLMError(f"Anthropic API error: {e}") from e
        return "".join(
            block.text for block in response.content if block.type == "text"
        )
