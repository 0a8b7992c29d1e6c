"""
Vision Provider Implementations

Pluggable vision model providers following a common interface.
Supports three hosted backends: Anthropic Claude, OpenAI, Google Gemini.
"""

from typing import Optional, Union

from ..models import Config, ProviderType
from .base import AnalysisError, VisionProvider
from .anthropic import ClaudeProvider
from .openai import OpenAIProvider
from .gemini import GeminiProvider

__all__ = [
    "AnalysisError",
    "VisionProvider",
    "ClaudeProvider",
    "OpenAIProvider",
    "GeminiProvider",
    "get_provider",
    "normalize_provider_type",
]

PROVIDER_CLASSES = {
    ProviderType.CLAUDE: ClaudeProvider,
    ProviderType.OPENAI: OpenAIProvider,
    ProviderType.GEMINI: GeminiProvider,
}


def normalize_provider_type(provider_type: Union[ProviderType, str]) -> ProviderType:
    """
    Convert a provider name such as " Claude " to a ProviderType.

    Raises:
        ValueError: If the name is not a supported provider
    """
    if isinstance(provider_type, str) and not isinstance(provider_type, ProviderType):
        provider_type = provider_type.strip().lower()

    try:
        return ProviderType(provider_type)
    except ValueError:
        raise ValueError(
            f"Unsupported provider type: {provider_type}. "
            f"Choose from: {', '.join(p.value for p in ProviderType)}"
        ) from None


def get_provider(
    provider_type: Union[ProviderType, str],
    api_key: Optional[str],
    config: Optional[Config] = None
) -> VisionProvider:
    """
    Factory function to get configured vision provider.

    Args:
        provider_type: One of "claude", "openai", or "gemini"
        api_key: API key for that provider
        config: Optional configuration supplying model names and limits

    Returns:
        Configured vision provider instance

    Raises:
        ValueError: If the API key is empty or the provider type is unknown

    Example:
        provider = get_provider("claude", api_key)
        result = await provider.analyze_image(image_path)
    """
    if not api_key:
        raise ValueError("API key is required")

    provider_type = normalize_provider_type(provider_type)
    provider_class = PROVIDER_CLASSES[provider_type]
    if config is None:
        return provider_class(api_key=api_key)

    return provider_class(
        api_key=api_key,
        model=config.model_for(provider_type),
        max_tokens=config.max_tokens,
        timeout=config.request_timeout
    )
