"""
Analysis Orchestrator

Coordinates settings lookup, provider selection and image analysis
to produce a Spark Sensei critique.
"""

import logging
from typing import Optional, Union

from .models import AnalysisResult, Config, ProviderType
from .providers import get_provider, normalize_provider_type
from .providers.base import ImageSource
from .storage import SettingsStore

logger = logging.getLogger(__name__)


class SetupRequiredError(ValueError):
    """No AI provider has been chosen"""


class ApiKeyRequiredError(ValueError):
    """The chosen provider has no API key"""

    def __init__(self, provider_type: ProviderType):
        self.provider_type = provider_type
        super().__init__(f"Please enter your {provider_type.value} API key in settings")


class SenseiAnalyzer:
    """
    Runs one image analysis end to end.

    Workflow:
    1. Resolve provider from argument, saved settings, or environment
    2. Resolve API key from saved settings, or environment
    3. Build provider via the factory and analyze the image
    4. Count the analysis against today's usage

    Example:
        config = load_config()
        analyzer = SenseiAnalyzer(SettingsStore(config.settings_path), config)
        result = await analyzer.analyze("breadboard.jpg")
        print(result.diagnosis)
    """

    def __init__(self, store: SettingsStore, config: Config):
        self.store = store
        self.config = config

    def resolve_provider_type(
        self,
        provider_type: Optional[Union[ProviderType, str]] = None
    ) -> ProviderType:
        """
        Pick the provider to use.

        Raises:
            SetupRequiredError: If no provider is chosen anywhere
            ValueError: If an explicit provider name is unknown
        """
        if provider_type:
            return normalize_provider_type(provider_type)

        saved = self.store.get_provider_type()
        if saved is not None:
            return saved

        if self.config.default_provider is not None:
            return self.config.default_provider

        raise SetupRequiredError("Please configure your AI provider in settings")

    def resolve_api_key(self, provider_type: ProviderType) -> str:
        """
        Find the API key for a provider.

        Raises:
            ApiKeyRequiredError: If neither settings nor environment has one
        """
        api_key = self.store.get_api_key(provider_type) or self.config.api_key_for(provider_type)
        if not api_key:
            raise ApiKeyRequiredError(provider_type)
        return api_key

    async def analyze(
        self,
        image: ImageSource,
        provider_type: Optional[Union[ProviderType, str]] = None
    ) -> AnalysisResult:
        """
        Analyze an image with the configured provider.

        Args:
            image: Image path, file:// URI or data URL
            provider_type: Override for the saved provider choice

        Returns:
            AnalysisResult from the provider

        Raises:
            SetupRequiredError: If no provider is configured
            ApiKeyRequiredError: If the provider has no API key
            AnalysisError: If the provider call fails
        """
        resolved = self.resolve_provider_type(provider_type)
        api_key = self.resolve_api_key(resolved)
        logger.debug("Using provider %s (key %s...)", resolved.value, api_key[:6])

        provider = get_provider(resolved, api_key, self.config)
        result = await provider.analyze_image(image)

        status = self.store.increment_analysis_count()
        logger.debug("Analyses today: %d", status.analysis_count)

        return result
