"""Tests for the spark-sensei command line, using click's CliRunner."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from click.testing import CliRunner

from spark_sensei.cli import main
from spark_sensei.providers.base import AnalysisError
from spark_sensei.response_parser import parse_analysis_response
from spark_sensei.storage import SettingsStore


@pytest.fixture
def settings_file(clean_env):
    return clean_env / "settings.json"


@pytest.fixture
def run(settings_file):
    runner = CliRunner()

    def _run(*args, **kwargs):
        return runner.invoke(main, ["--settings", str(settings_file), *args], **kwargs)

    return _run


@pytest.fixture
def fake_provider(canonical_reply):
    provider = MagicMock()
    provider.analyze_image = AsyncMock(return_value=parse_analysis_response(canonical_reply))
    with patch("spark_sensei.analyzer.get_provider", return_value=provider):
        yield provider


def test_set_provider_and_key(run, settings_file):
    assert run("config", "set-provider", "claude").exit_code == 0
    assert run("config", "set-key", "claude", "sk-ant-secret-value").exit_code == 0

    store = SettingsStore(settings_file)
    assert store.get_provider_type().value == "claude"
    assert store.get_api_key("claude") == "sk-ant-secret-value"


def test_set_key_prompts_when_omitted(run, settings_file):
    result = run("config", "set-key", "gemini", input="AIza-prompted\n")

    assert result.exit_code == 0
    assert SettingsStore(settings_file).get_api_key("gemini") == "AIza-prompted"


def test_show_masks_keys(run):
    run("config", "set-provider", "openai")
    run("config", "set-key", "openai", "sk-very-secret-key")

    result = run("config", "show")

    assert result.exit_code == 0
    assert "sk-very-secret-key" not in result.output
    assert "sk-ver" in result.output


def test_delete_key_and_clear(run, settings_file):
    run("config", "set-provider", "openai")
    run("config", "set-key", "openai", "sk-1")
    run("config", "set-key", "claude", "sk-ant-2")

    assert run("config", "delete-key", "openai").exit_code == 0
    assert SettingsStore(settings_file).get_api_key("openai") is None

    assert run("config", "clear", "--yes").exit_code == 0
    store = SettingsStore(settings_file)
    assert store.get_provider_type() is None
    assert store.get_api_key("claude") is None


def test_analyze_without_provider_asks_for_setup(run, png_image):
    result = run("analyze", str(png_image))

    assert result.exit_code == 1
    assert "Setup Required" in result.output


def test_analyze_without_key_asks_for_key(run, png_image):
    run("config", "set-provider", "gemini")

    result = run("analyze", str(png_image))

    assert result.exit_code == 1
    assert "API Key Required" in result.output
    assert "set-key gemini" in result.output


def test_analyze_json_output(run, png_image, fake_provider):
    run("config", "set-provider", "claude")
    run("config", "set-key", "claude", "sk-ant-123")

    result = run("analyze", str(png_image), "--output", "json")

    assert result.exit_code == 0
    data = json.loads(result.stdout)
    assert data["diagnosis"] == "Your LED is backwards."
    assert data["note"] == "Polarity is not a suggestion, it is the law."
    fake_provider.analyze_image.assert_awaited_once_with(str(png_image))


def test_analyze_rich_output(run, png_image, fake_provider):
    run("config", "set-key", "openai", "sk-123")

    result = run("analyze", str(png_image), "--provider", "openai")

    assert result.exit_code == 0
    assert "DIAGNOSIS" in result.output
    assert "SENSEI'S NOTE" in result.output
    assert "Your LED is backwards." in result.output


def test_analyze_reports_provider_failure(run, png_image, fake_provider):
    run("config", "set-provider", "claude")
    run("config", "set-key", "claude", "sk-ant-123")
    fake_provider.analyze_image.side_effect = AnalysisError("Claude API error: overloaded")

    result = run("analyze", str(png_image))

    assert result.exit_code == 1
    assert "Analysis Failed" in result.output
    assert "overloaded" in result.output


def test_analysis_is_counted(run, png_image, settings_file, fake_provider):
    run("config", "set-provider", "claude")
    run("config", "set-key", "claude", "sk-ant-123")

    run("analyze", str(png_image), "--output", "json")

    assert SettingsStore(settings_file).get_subscription_status().analysis_count == 1


def test_subscription_change_and_show(run, settings_file):
    result = run("subscription", "change", "premium")
    assert result.exit_code == 0
    assert SettingsStore(settings_file).get_subscription_status().tier.value == "premium"

    result = run("subscription", "show")
    assert result.exit_code == 0
    assert "CURRENT PLAN: PREMIUM" in result.output


@pytest.mark.parametrize("name, value", [
    ("SPARK_SENSEI_PROVIDER", "claud"),
    ("SPARK_SENSEI_MAX_TOKENS", "abc"),
    ("SPARK_SENSEI_TIMEOUT", "0"),
])
def test_invalid_environment_is_reported(run, monkeypatch, name, value):
    monkeypatch.setenv(name, value)

    result = run("config", "show")

    assert result.exit_code == 1
    assert "Configuration error" in result.output
    assert name in result.output
    assert result.exception is None or isinstance(result.exception, SystemExit)
