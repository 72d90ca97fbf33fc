"""OpenAI LLM provider."""

from typing import Optional

import openai

from ..exceptions import LLMError
from .base import LLMProvider

_DEFAULT_MAX_OUTPUT = 1_024


class OpenAIProvider(LLMProvider):
    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 30.0):
        self._client = openai.OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        self._model = model
        # Newer models (o1, o3, gpt-4.1, gpt-5, etc.) require
        # max_completion_tokens instead of max_tokens. We auto-detect
        # on the first call and cache the result.
        self._use_max_completion_tokens = not self._is_legacy_model(model)

    @property
    def default_max_output_tokens(self) -> int:
        return _DEFAULT_MAX_OUTPUT

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        try:
            response = self._call_api(max_output_tokens or _DEFAULT_MAX_OUTPUT, messages)
        except openai.APIError as e:
            raise LLMError(f"OpenAI API error: {e}") from e
        return response.choices[0].message.content or ""

    def _call_api(self, tokens: int, messages: list):
        """Call the OpenAI API, auto-detecting max_tokens vs max_completion_tokens."""
        token_param = (
            "max_completion_tokens"
            if self._use_max_completion_tokens
            else "max_tokens"
        )
        try:
            return self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                **{token_param: tokens},
            )
        except openai.BadRequestError as e:
            # If the parameter is unsupported, toggle and retry once
            if "unsupported_parameter" in str(e).lower() or "Unsupported parameter" in str(e):
                self._use_max_completion_tokens = not self._use_max_completion_tokens
                alt_param = (
                    "max_completion_tokens"
                    if self._use_max_completion_tokens
                    else "max_tokens"
                )
                return self._client.chat.completions.create(
                    model=self._model,
                    messages=messages,
                    **{alt_param: tokens},
                )
            raise

    @staticmethod
    def _is_legacy_model(model: str) -> bool:
        """Check if the model uses the legacy max_tokens parameter."""
        legacy_prefixes = ("gpt-3.5", "gpt-4o", "gpt-4-turbo", "gpt-4-")
        return any(model.startswith(p) for p in legacy_prefixes)
