"""Tests for get_provider: selection by type, key validation, config pass-through."""

import pytest

from spark_sensei.models import Config, ProviderType
from spark_sensei.providers import ClaudeProvider, GeminiProvider, OpenAIProvider, get_provider


@pytest.mark.parametrize(
    "provider_type, expected_class",
    [
        (ProviderType.CLAUDE, ClaudeProvider),
        (ProviderType.OPENAI, OpenAIProvider),
        (ProviderType.GEMINI, GeminiProvider),
        ("claude", ClaudeProvider),
        ("OpenAI", OpenAIProvider),
        (" gemini ", GeminiProvider),
    ],
)
def test_selects_adapter_by_type(provider_type, expected_class):
    provider = get_provider(provider_type, "key-123")

    assert isinstance(provider, expected_class)
    assert provider.is_available()


@pytest.mark.parametrize("api_key", [None, ""])
def test_missing_api_key_is_rejected(api_key):
    with pytest.raises(ValueError, match="API key is required"):
        get_provider(ProviderType.CLAUDE, api_key)


def test_unknown_provider_is_rejected():
    with pytest.raises(ValueError, match="Unsupported provider type: llava"):
        get_provider("llava", "key-123")


def test_config_supplies_model_and_limits(tmp_path):
    config = Config(
        gemini_model="gemini-2.0-flash",
        max_tokens=2048,
        request_timeout=30,
        settings_path=tmp_path / "settings.json",
    )

    provider = get_provider("gemini", "key-123", config)

    assert provider.model == "gemini-2.0-flash"
    assert provider.max_tokens == 2048
    assert provider.timeout == 30
