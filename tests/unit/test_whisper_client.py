"""Unit tests for the Whisper transcription client and provider lookup."""

import asyncio
import pytest
from unittest.mock import patch

from conftest import FakeTranscriptionClient, write_chunk
from speechstream.errors import CredentialsError, TranscriptionError
from speechstream.transcription import (
    DEFAULT_OPENAI_BASE_URL,
    ProviderSettingsManager,
    WhisperTranscriptionClient,
)


class FakeResponse:
    def __init__(self, status=200, payload=None, text=""):
        self.status = status
        self.payload = payload
        self._text = text

    async def text(self):
        return self._text

    async def json(self, content_type=None):
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


class FakeClientSession:
    """Replaces aiohttp.ClientSession and records POST requests."""

    requests = []
    response = FakeResponse(payload={"text": " hello there "})

    def __init__(self, timeout=None):
        self.timeout = timeout

    def post(self, url, headers=None, data=None):
        FakeClientSession.requests.append({"url": url, "headers": headers, "data": data})
        return FakeClientSession.response

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args):
        return False


@pytest.fixture
def fake_session():
    FakeClientSession.requests = []
    FakeClientSession.response = FakeResponse(payload={"text": " hello there "})
    with patch('speechstream.transcription.whisper_client.aiohttp.ClientSession', FakeClientSession):
        yield FakeClientSession


def make_client(profiles=None):
    if profiles is None:
        profiles = [{"id": "main", "api_provider": "openai", "openai_api_key": "sk-test"}]
    return WhisperTranscriptionClient(ProviderSettingsManager(profiles))


@pytest.mark.unit
class TestProviderSettingsManager:
    """Test cases for provider profile lookup."""

    def test_openai_profile(self):
        settings = ProviderSettingsManager([
            {"api_provider": "openai", "openai_api_key": "sk-1", "openai_base_url": "https://proxy.local/v1/"},
        ])

        assert settings.get_openai_api_key() == "sk-1"
        assert settings.get_openai_base_url() == "https://proxy.local/v1"

    def test_openai_native_profile(self):
        settings = ProviderSettingsManager([
            {"api_provider": "anthropic", "openai_api_key": "ignored"},
            {"api_provider": "openai-native", "openai_native_api_key": "sk-native"},
        ])

        assert settings.get_openai_api_key() == "sk-native"
        assert settings.get_openai_base_url() == DEFAULT_OPENAI_BASE_URL

    def test_first_profile_with_key_wins(self):
        settings = ProviderSettingsManager([
            {"api_provider": "openai"},
            {"api_provider": "openai-native", "openai_native_api_key": "sk-2"},
            {"api_provider": "openai", "openai_api_key": "sk-3"},
        ])

        assert settings.get_openai_api_key() == "sk-2"

    def test_no_profiles(self):
        settings = ProviderSettingsManager([])

        assert settings.get_openai_api_key() is None
        assert settings.get_openai_base_url() == DEFAULT_OPENAI_BASE_URL


@pytest.mark.unit
class TestWhisperTranscriptionClient:
    """Test cases for WhisperTranscriptionClient."""

    def test_initialize_without_key_raises(self):
        client = make_client(profiles=[])

        with pytest.raises(CredentialsError):
            client.initialize()

    def test_transcribe_without_key_raises(self, temp_data_dir):
        client = make_client(profiles=[])
        path = write_chunk(temp_data_dir, 0)

        with pytest.raises(CredentialsError):
            asyncio.run(client.transcribe(str(path)))

    def test_small_file_returns_empty_without_request(self, temp_data_dir, fake_session):
        client = make_client()
        path = write_chunk(temp_data_dir, 0, size=100)

        assert asyncio.run(client.transcribe(str(path))) == ""
        assert fake_session.requests == []

    def test_transcribe_posts_to_api(self, temp_data_dir, fake_session):
        client = make_client()
        path = write_chunk(temp_data_dir, 0)

        text = asyncio.run(client.transcribe(str(path), language="en", prompt="previous\n\nSpeechStream"))

        assert text == "hello there"
        assert len(fake_session.requests) == 1
        request = fake_session.requests[0]
        assert request["url"] == f"{DEFAULT_OPENAI_BASE_URL}/audio/transcriptions"
        assert request["headers"] == {"Authorization": "Bearer sk-test"}

    def test_api_error_raises(self, temp_data_dir, fake_session):
        fake_session.response = FakeResponse(status=401, text="invalid key")
        client = make_client()
        path = write_chunk(temp_data_dir, 0)

        with pytest.raises(TranscriptionError, match="401 - invalid key"):
            asyncio.run(client.transcribe(str(path)))

    def test_missing_text_returns_empty(self, temp_data_dir, fake_session):
        fake_session.response = FakeResponse(payload={"segments": []})
        client = make_client()
        path = write_chunk(temp_data_dir, 0)

        assert asyncio.run(client.transcribe(str(path))) == ""

    def test_non_object_response_raises(self, temp_data_dir, fake_session):
        fake_session.response = FakeResponse(payload=["unexpected"])
        client = make_client()
        path = write_chunk(temp_data_dir, 0)

        with pytest.raises(TranscriptionError):
            asyncio.run(client.transcribe(str(path)))

    def test_reset_drops_cached_credentials(self):
        profiles = [{"api_provider": "openai", "openai_api_key": "sk-old"}]
        client = make_client(profiles)
        client.initialize()

        profiles[0]["openai_api_key"] = "sk-new"
        client.reset()

        assert client._get_credentials()[0] == "sk-new"


@pytest.mark.unit
def test_transcribe_batch_preserves_order(temp_data_dir):
    client = FakeTranscriptionClient(texts={"chunk_000.webm": "zero", "chunk_001.webm": "one"})
    paths = [str(write_chunk(temp_data_dir, 1)), str(write_chunk(temp_data_dir, 0))]

    texts = asyncio.run(client.transcribe_batch(paths, language="en"))

    assert texts == ["one", "zero"]
    assert all(call["language"] == "en" for call in client.calls)
