from typing import ClassVar

from legalflow.analysis.client_base import BaseCompletionClient
from legalflow.analysis.engine import AnalysisEngine
from legalflow.analysis.example_client_adapter import ExampleClientAdapter
from legalflow.analysis.openai_client_adapter import OpenAIClientAdapter
from legalflow.config.settings import Settings


class AnalysisEngineFactory:
    """Creates the analysis engine for the configured AI provider."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, settings: Settings) -> AnalysisEngine:
        """Create a configured analysis engine from application settings."""
        provider = settings.analysis_provider.lower()
        client: BaseCompletionClient
        if provider == "example":
            client = ExampleClientAdapter()
        else:
            client = OpenAIClientAdapter(
                api_key=settings.analysis_api_key,
                timeout_seconds=settings.analysis_timeout_seconds,
                base_url=cls._resolve_base_url(provider, settings),
            )
        return AnalysisEngine(
            client=client,
            model=settings.analysis_model_name,
            temperature=settings.analysis_temperature,
            timeout_seconds=settings.analysis_timeout_seconds,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        custom = settings.analysis_base_url.strip()
        if provider == "openai":
            return custom or None
        if provider == "openai_compatible":
            if not custom:
                raise ValueError(
                    "analysis_base_url is required for analysis_provider=openai_compatible"
                )
            return custom
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return custom or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown analysis provider '{provider}'. Choose from: {supported}")
