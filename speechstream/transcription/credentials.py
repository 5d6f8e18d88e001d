"""API key and base URL lookup from stored provider profiles."""

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_BASE_URL = "https://api.openai.com/v1"

# api_provider -> (api key field, base url field)
_PROVIDER_FIELDS = {
    "openai": ("openai_api_key", "openai_base_url"),
    "openai-native": ("openai_native_api_key", "openai_native_base_url"),
}


class ProviderSettingsManager:
    """Searches provider profiles for OpenAI-compatible credentials."""

    def __init__(self, profiles: List[Dict[str, Any]]):
        """Initialize settings manager.

        Args:
            profiles: Provider profiles, e.g. from SpeechStreamConfig.get_provider_profiles()
        """
        self.profiles = profiles

    def _openai_profiles(self):
        for profile in self.profiles:
            fields = _PROVIDER_FIELDS.get(profile.get("api_provider"))
            if fields:
                yield profile, fields

    def get_openai_api_key(self) -> Optional[str]:
        """Get the API key of the first OpenAI profile that has one."""
        for profile, (key_field, _) in self._openai_profiles():
            api_key = profile.get(key_field)
            if api_key:
                logger.debug(f"Using API key from provider profile '{profile.get('id', '?')}'")
                return api_key
        return None

    def get_openai_base_url(self) -> str:
        """Get the base URL of the first OpenAI profile that sets one."""
        for profile, (_, url_field) in self._openai_profiles():
            base_url = profile.get(url_field)
            if base_url:
                return base_url.rstrip("/")
        return DEFAULT_OPENAI_BASE_URL
