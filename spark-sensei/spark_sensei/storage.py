"""
Settings Store

Flat key-value persistence for the chosen provider, per-provider API keys
and subscription status. Values live in a single JSON object on disk.
"""

import json
import logging
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from .models import ProviderType, SubscriptionStatus, SubscriptionTier

logger = logging.getLogger(__name__)

STORAGE_KEYS = {
    "PROVIDER_TYPE": "@spark_sensei_provider_type",
    "API_KEY_CLAUDE": "@spark_sensei_api_key_claude",
    "API_KEY_OPENAI": "@spark_sensei_api_key_openai",
    "API_KEY_GEMINI": "@spark_sensei_api_key_gemini",
    "SUBSCRIPTION": "@spark_sensei_subscription",
}


class SettingsStore:
    """
    Key-value settings persisted as JSON.

    A missing or unreadable file behaves as an empty store. Every write
    replaces the file atomically.

    Example:
        store = SettingsStore(Path("~/.spark-sensei/settings.json").expanduser())
        store.save_provider_type(ProviderType.CLAUDE)
        store.save_api_key(ProviderType.CLAUDE, "sk-ant-...")
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    # Raw key-value access

    def get_item(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_items(self, *keys: str) -> None:
        data = self._read()
        if any(key in data for key in keys):
            for key in keys:
                data.pop(key, None)
            self._write(data)

    # Provider type

    def save_provider_type(self, provider_type: Union[ProviderType, str]) -> None:
        self.set_item(STORAGE_KEYS["PROVIDER_TYPE"], ProviderType(provider_type).value)

    def get_provider_type(self) -> Optional[ProviderType]:
        value = self.get_item(STORAGE_KEYS["PROVIDER_TYPE"])
        if value is None:
            return None
        try:
            return ProviderType(value)
        except ValueError:
            logger.warning("Ignoring unknown provider type in settings: %s", value)
            return None

    # API keys

    def save_api_key(self, provider_type: Union[ProviderType, str], api_key: str) -> None:
        self.set_item(self.api_key_storage_key(provider_type), api_key.strip())

    def get_api_key(self, provider_type: Union[ProviderType, str]) -> Optional[str]:
        return self.get_item(self.api_key_storage_key(provider_type)) or None

    def delete_api_key(self, provider_type: Union[ProviderType, str]) -> None:
        self.remove_items(self.api_key_storage_key(provider_type))

    @staticmethod
    def api_key_storage_key(provider_type: Union[ProviderType, str]) -> str:
        """
        Map a provider to the key its API key is stored under.

        Raises:
            ValueError: If the provider type is unknown
        """
        try:
            provider_type = ProviderType(provider_type)
        except ValueError:
            raise ValueError(f"Unknown provider type: {provider_type}") from None
        return STORAGE_KEYS[f"API_KEY_{provider_type.name}"]

    def clear_all(self) -> None:
        """Remove the provider choice and every stored API key"""
        self.remove_items(
            STORAGE_KEYS["PROVIDER_TYPE"],
            STORAGE_KEYS["API_KEY_CLAUDE"],
            STORAGE_KEYS["API_KEY_OPENAI"],
            STORAGE_KEYS["API_KEY_GEMINI"],
        )

    # Subscription

    def get_subscription_status(self) -> SubscriptionStatus:
        """
        Load subscription status, resetting the daily counter when the
        stored reset date is not today.
        """
        raw = self.get_item(STORAGE_KEYS["SUBSCRIPTION"])
        status = SubscriptionStatus()
        if raw:
            try:
                status = SubscriptionStatus.model_validate_json(raw)
            except ValidationError:
                logger.warning("Stored subscription status is invalid, using defaults")

        today = date.today().isoformat()
        if status.last_reset_date != today:
            status = status.model_copy(update={"analysis_count": 0, "last_reset_date": today})
            self.save_subscription_status(status)

        return status

    def save_subscription_status(self, status: SubscriptionStatus) -> None:
        self.set_item(STORAGE_KEYS["SUBSCRIPTION"], status.model_dump_json())

    def increment_analysis_count(self) -> SubscriptionStatus:
        status = self.get_subscription_status()
        status = status.model_copy(update={"analysis_count": status.analysis_count + 1})
        self.save_subscription_status(status)
        return status

    def upgrade_to_premium(self) -> SubscriptionStatus:
        return self._change_tier(SubscriptionTier.PREMIUM)

    def upgrade_to_pro(self) -> SubscriptionStatus:
        return self._change_tier(SubscriptionTier.PRO)

    def reset_to_free(self) -> SubscriptionStatus:
        return self._change_tier(SubscriptionTier.FREE)

    def _change_tier(self, tier: SubscriptionTier) -> SubscriptionStatus:
        status = self.get_subscription_status().model_copy(update={"tier": tier})
        self.save_subscription_status(status)
        return status

    # File access

    def _read(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read settings file %s: %s", self.path, e)
            return {}

        if not isinstance(data, dict):
            logger.warning("Settings file %s does not hold an object, ignoring it", self.path)
            return {}
        return data

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".settings-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise
