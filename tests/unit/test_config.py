"""Unit tests for SpeechStreamConfig YAML loading."""

import os
import pytest
from pathlib import Path

from speechstream.config import SpeechStreamConfig


def write_config(directory, content: str) -> str:
    path = Path(directory) / "speechstream.yaml"
    path.write_text(content, encoding="utf-8")
    return str(path)


@pytest.mark.unit
class TestSpeechStreamConfig:
    """Test cases for SpeechStreamConfig."""

    def test_no_path_uses_defaults(self):
        config = SpeechStreamConfig()

        assert config.config == {}
        assert config.get("streaming.language", "en") == "en"
        assert config.get_streaming_config().chunk_duration_seconds == 3
        assert config.get_provider_profiles() == []
        assert config.get_capture_overrides() == {}

    def test_missing_file(self, temp_data_dir):
        with pytest.raises(FileNotFoundError):
            SpeechStreamConfig(os.path.join(temp_data_dir, "missing.yaml"))

    def test_empty_file(self, temp_data_dir):
        with pytest.raises(ValueError, match="empty"):
            SpeechStreamConfig(write_config(temp_data_dir, ""))

    def test_invalid_yaml(self, temp_data_dir):
        with pytest.raises(ValueError, match="Invalid YAML"):
            SpeechStreamConfig(write_config(temp_data_dir, "streaming: [unclosed"))

    def test_top_level_must_be_mapping(self, temp_data_dir):
        with pytest.raises(ValueError, match="mapping"):
            SpeechStreamConfig(write_config(temp_data_dir, "- a\n- b\n"))

    def test_get_and_set_dot_notation(self, temp_data_dir):
        config = SpeechStreamConfig(write_config(temp_data_dir, "streaming:\n  language: de\n"))

        assert config.get("streaming.language") == "de"
        assert config.get("streaming.missing", 7) == 7
        assert config.get("streaming.language.deeper") is None

        config.set("capture.input_device", "hw:1")
        assert config.get("capture.input_device") == "hw:1"

    def test_streaming_config_with_overrides(self, temp_data_dir):
        config = SpeechStreamConfig(write_config(
            temp_data_dir,
            "streaming:\n  chunk_duration_seconds: 4\n  max_chunks: 10\n  keep_chunk_files: true\n",
        ))

        streaming = config.get_streaming_config({"max_chunks": 2})

        assert streaming.chunk_duration_seconds == 4
        assert streaming.max_chunks == 2

    def test_relative_paths_resolved_against_config_dir(self, temp_data_dir):
        config = SpeechStreamConfig(write_config(
            temp_data_dir,
            "streaming:\n  working_directory: chunks\nlogging:\n  file_path: logs/app.log\n",
        ))

        assert config.get("streaming.working_directory") == str(Path(temp_data_dir) / "chunks")
        assert config.get("logging.file_path") == str(Path(temp_data_dir) / "logs" / "app.log")
        assert config.get_working_directory() == str((Path(temp_data_dir) / "chunks").absolute())

    def test_provider_profiles_must_be_list(self, temp_data_dir):
        config = SpeechStreamConfig(write_config(temp_data_dir, "providers:\n  api_provider: openai\n"))

        with pytest.raises(ValueError):
            config.get_provider_profiles()

    def test_capture_overrides(self, temp_data_dir):
        config = SpeechStreamConfig(write_config(
            temp_data_dir,
            "capture:\n  input_format: alsa\n  input_device: ''\n",
        ))

        assert config.get_capture_overrides() == {"input_format": "alsa"}
