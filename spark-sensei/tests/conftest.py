"""Pytest fixtures shared across the test suite. No test touches the network."""

import pytest

from spark_sensei.config import ENV_VARS as CONFIG_ENV_VARS
from spark_sensei.models import Config
from spark_sensei.storage import SettingsStore

CANONICAL_REPLY = """🛑 DIAGNOSIS: Your LED is backwards.
🔍 DETAILS:
- The long leg (anode) is connected to GND.
- No current can flow through the diode in reverse.
💡 THE FIX: Rotate the LED 180 degrees so the long leg meets the resistor.
🎓 SENSEI'S NOTE: Polarity is not a suggestion, it is the law."""

ENV_VARS = (*CONFIG_ENV_VARS.values(), "GOOGLE_API_KEY")


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """
    Isolate from the developer's environment and .env files.

    Each variable is set then deleted so monkeypatch also removes values
    that load_dotenv writes during the test.
    """
    for name in ENV_VARS:
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def store(tmp_path):
    return SettingsStore(tmp_path / "settings" / "settings.json")


@pytest.fixture
def config(tmp_path):
    return Config(settings_path=tmp_path / "settings" / "settings.json")


@pytest.fixture
def png_image(tmp_path):
    path = tmp_path / "breadboard.png"
    path.write_bytes(b"\x89PNG\r\n\x1a\nfake-image-bytes")
    return path


@pytest.fixture
def canonical_reply():
    return CANONICAL_REPLY
