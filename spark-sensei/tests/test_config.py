"""Tests for load_config: .env discovery, environment overrides, validation."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from spark_sensei.config import ENV_VARS, load_config
from spark_sensei.models import Config, ProviderType


def test_defaults_without_environment(clean_env):
    config = load_config()

    assert config.anthropic_api_key is None
    assert config.default_provider is None
    assert config.claude_model == "claude-3-5-sonnet-20241022"
    assert config.max_tokens == 1024
    assert config.settings_path == clean_env / ".spark-sensei" / "settings.json"


def test_reads_explicit_env_file(clean_env):
    env_file = clean_env / "sensei.env"
    env_file.write_text(
        "ANTHROPIC_API_KEY=sk-ant-file\n"
        "SPARK_SENSEI_PROVIDER=Gemini\n"
        "GEMINI_MODEL=gemini-2.0-flash\n"
        "SPARK_SENSEI_MAX_TOKENS=2048\n",
        encoding="utf-8",
    )

    config = load_config(env_file)

    assert config.anthropic_api_key == "sk-ant-file"
    assert config.default_provider == ProviderType.GEMINI
    assert config.gemini_model == "gemini-2.0-flash"
    assert config.max_tokens == 2048


def test_reads_dotenv_in_current_directory(clean_env):
    (clean_env / ".env").write_text("OPENAI_API_KEY=sk-cwd\n", encoding="utf-8")

    assert load_config().openai_api_key == "sk-cwd"


def test_environment_overrides_env_file(clean_env, monkeypatch):
    env_file = clean_env / "sensei.env"
    env_file.write_text("OPENAI_API_KEY=sk-file\n", encoding="utf-8")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

    assert load_config(env_file).openai_api_key == "sk-env"


def test_google_api_key_is_accepted_for_gemini(clean_env, monkeypatch):
    monkeypatch.setenv("GOOGLE_API_KEY", "AIza-google")

    config = load_config()

    assert config.gemini_api_key == "AIza-google"
    assert config.api_key_for(ProviderType.GEMINI) == "AIza-google"


def test_blank_provider_is_unset(clean_env, monkeypatch):
    monkeypatch.setenv("SPARK_SENSEI_PROVIDER", "  ")

    assert load_config().default_provider is None


def test_invalid_provider_is_rejected(clean_env, monkeypatch):
    monkeypatch.setenv("SPARK_SENSEI_PROVIDER", "llava")

    with pytest.raises(ValidationError):
        load_config()


def test_settings_path_expands_home(clean_env, monkeypatch):
    monkeypatch.setenv("SPARK_SENSEI_SETTINGS", "~/sensei/settings.json")

    assert load_config().settings_path == clean_env / "sensei" / "settings.json"


def test_api_key_for_treats_empty_as_missing():
    config = Config(openai_api_key="", settings_path=Path("settings.json"))

    assert config.api_key_for(ProviderType.OPENAI) is None
    assert config.model_for(ProviderType.OPENAI) == "gpt-4o"


def test_env_vars_cover_every_config_field():
    assert set(ENV_VARS) == set(Config.model_fields)
