from __future__ import annotations

try:
    from openai import OpenAI as _OpenAI
except ImportError:
    _OpenAI = None  # type: ignore[assignment,misc]

from codekata_core.providers.base import BaseEvaluator


class OpenAIEvaluator(BaseEvaluator):
    MODEL = "gpt-4o"
    TEMPERATURE = 0.0

    def __init__(self, api_key: str, timeout: float = 10.0):
        super().__init__(timeout=timeout)
        if _OpenAI is None:
            raise ImportError(
                "The 'openai' package is required for this provider. Install it with: pip install 'codekata[openai]'"
            )
        self.client = _OpenAI(api_key=api_key, timeout=timeout, max_retries=0)

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        from openai import APITimeoutError

        try:
            response = self.client.chat.completions.create(
                model=self.MODEL,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.TEMPERATURE,
                max_tokens=self.MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except APITimeoutError as e:
            raise TimeoutError(str(e)) from e
        return response.choices[0].message.content or ""
