from abc import ABC, abstractmethod


class BaseCompletionClient(ABC):
    """Contract for provider-specific text completion clients."""

    @abstractmethod
    async def complete(
        self,
        *,
        task: str,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """Return the provider response as plain text.

        ``task`` names the analysis call (e.g. ``"detect_clauses"``); it is
        informational for network adapters.

        Raises:
            ProviderError: on any provider-side failure.
        """
