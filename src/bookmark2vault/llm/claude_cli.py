"""Provider that shells out to a locally installed ``claude`` CLI."""

import subprocess
from typing import Optional

from ..exceptions import LLMError
from .base import LLMProvider


class ClaudeCLIProvider(LLMProvider):
    """Runs ``claude --print`` once per prompt.

    Useful when the machine already has a logged-in Claude CLI and no API
    key. The CLI has no separate system prompt flag, so both prompts are sent
    as one message.
    """

    def __init__(self, model: str = "", timeout: float = 30.0, executable: str = "claude"):
        self._model = model
        self._timeout = timeout
        self._executable = executable

    @property
    def default_max_output_tokens(self) -> int:
        return 1_024

    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        max_output_tokens: Optional[int] = None,
    ) -> str:
        args = [self._executable, "--print", "--output-format", "text"]
        if self._model:
            args.extend(["--model", self._model])
        args.append(f"{system_prompt}\n\n{user_prompt}")

        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise LLMError(f"Claude CLI timed out after {self._timeout}s") from e
        except OSError as e:
            raise LLMError(f"Could not run {self._executable}: {e}") from e

        if proc.returncode != 0:
            raise LLMError(
                f"Claude CLI exited with code {proc.returncode}: {proc.stderr.strip()}"
            )
        return proc.stdout.strip()
