"""OpenAI Whisper transcription client."""

import os
import logging
from typing import Optional, Tuple

import aiohttp

from .base import AbstractTranscriptionClient
from .credentials import ProviderSettingsManager
from ..constants import MIN_TRANSCRIBABLE_BYTES
from ..errors import CredentialsError, TranscriptionError

logger = logging.getLogger(__name__)


class WhisperTranscriptionClient(AbstractTranscriptionClient):
    """Sends chunk files to an OpenAI-compatible /audio/transcriptions endpoint."""

    def __init__(self,
                 provider_settings: ProviderSettingsManager,
                 model: str = "whisper-1",
                 response_format: str = "verbose_json",
                 timeout_seconds: float = 30.0):
        """Initialize Whisper client.

        Args:
            provider_settings: Source of the API key and base URL
            model: Transcription model name
            response_format: API response format
            timeout_seconds: Total timeout for one request
        """
        self.provider_settings = provider_settings
        self.model = model
        self.response_format = response_format
        self.timeout_seconds = timeout_seconds
        self._credentials: Optional[Tuple[str, str]] = None

    def _get_credentials(self) -> Tuple[str, str]:
        """Resolve and cache (api_key, base_url).

        Raises:
            CredentialsError: If no profile carries an API key
        """
        if self._credentials is None:
            api_key = self.provider_settings.get_openai_api_key()
            if not api_key:
                raise CredentialsError(
                    "OpenAI API key not configured. Add an 'openai' or 'openai-native' "
                    "provider profile to the configuration."
                )
            base_url = self.provider_settings.get_openai_base_url()
            self._credentials = (api_key, base_url)
            logger.info(f"Whisper client using {base_url} with model {self.model}")
        return self._credentials

    def initialize(self) -> bool:
        self._get_credentials()
        return True

    async def transcribe(self, audio_path: str,
                         language: Optional[str] = None,
                         prompt: Optional[str] = None) -> str:
        """Transcribe a chunk file through the Whisper API.

        Raises:
            CredentialsError: If no API key is configured
            TranscriptionError: If the API answers with an error
        """
        api_key, base_url = self._get_credentials()

        file_size = os.path.getsize(audio_path)
        if file_size < MIN_TRANSCRIBABLE_BYTES:
            # Empty or truncated segment, e.g. recording stopped right after a split
            logger.debug(f"Skipping {audio_path}: only {file_size} bytes")
            return ""

        file_name = os.path.basename(audio_path) or "audio.webm"
        with open(audio_path, 'rb') as f:
            audio_bytes = f.read()

        form = aiohttp.FormData()
        form.add_field("file", audio_bytes, filename=file_name, content_type="audio/webm")
        form.add_field("model", self.model)
        form.add_field("response_format", self.response_format)
        if language:
            form.add_field("language", language)
        if prompt:
            form.add_field("prompt", prompt)

        headers = {"Authorization": f"Bearer {api_key}"}
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)

        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(f"{base_url}/audio/transcriptions", headers=headers, data=form) as response:
                if response.status != 200:
                    error_text = await response.text()
                    raise TranscriptionError(f"Whisper API error: {response.status} - {error_text}")
                result = await response.json(content_type=None)

        return self._extract_text(result, file_name)

    def _extract_text(self, result, file_name: str) -> str:
        if not isinstance(result, dict):
            raise TranscriptionError(f"Unexpected Whisper response for {file_name}: {result!r}")

        text = (result.get("text") or "").strip()
        if not text:
            logger.info(f"No transcription text received for {file_name} (likely silent audio)")
        return text

    def reset(self) -> None:
        self._credentials = None
