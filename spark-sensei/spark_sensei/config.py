"""
Configuration Management

Loads configuration from .env files and provides typed config objects.
Handles API keys, model names and default values.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .models import Config


# Environment variable read for each Config field
ENV_VARS = {
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "openai_api_key": "OPENAI_API_KEY",
    "gemini_api_key": "GEMINI_API_KEY",
    "default_provider": "SPARK_SENSEI_PROVIDER",
    "claude_model": "CLAUDE_MODEL",
    "openai_model": "OPENAI_MODEL",
    "gemini_model": "GEMINI_MODEL",
    "max_tokens": "SPARK_SENSEI_MAX_TOKENS",
    "settings_path": "SPARK_SENSEI_SETTINGS",
    "request_timeout": "SPARK_SENSEI_TIMEOUT",
}


def load_config(env_file: Optional[Path] = None) -> Config:
    """
    Load configuration from .env file and environment variables.

    Searches for .env file in:
    1. Provided env_file path
    2. Current directory
    3. User's home directory

    Environment variables override .env file values.

    Args:
        env_file: Optional path to .env file

    Returns:
        Config object with all settings

    Example:
        config = load_config()
        key = config.api_key_for(ProviderType.OPENAI)
    """
    # Load .env file
    if env_file and env_file.exists():
        load_dotenv(env_file)
    elif Path(".env").exists():
        load_dotenv(".env")
    elif (Path.home() / ".env").exists():
        load_dotenv(Path.home() / ".env")

    values = {field: os.getenv(name) for field, name in ENV_VARS.items()}
    values["gemini_api_key"] = values["gemini_api_key"] or os.getenv("GOOGLE_API_KEY")

    # Only pass what is set so field defaults apply otherwise
    values = {field: value for field, value in values.items() if value}

    return Config(**values)
