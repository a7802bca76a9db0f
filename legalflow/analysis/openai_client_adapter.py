import httpx
import openai

from legalflow.analysis.client_base import BaseCompletionClient
from legalflow.analysis.exceptions import ProviderError


class OpenAIClientAdapter(BaseCompletionClient):
    """Completion client built on the OpenAI-compatible async chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: float,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    async def complete(
        self,
        *,
        task: str,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        messages = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=messages,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ProviderError(f"AI provider network error during {task}: {exc}") from exc
        except openai.APIError as exc:
            raise ProviderError(f"AI provider API error during {task}: {exc}") from exc

        if not response.choices:
            raise ProviderError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ProviderError("AI returned empty response")
        return content
