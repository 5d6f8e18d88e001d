"""Unit tests for StreamingConfig defaults and validation."""

import pytest

from speechstream.constants import HOT_WORD_PHRASE
from speechstream.errors import InvalidConfigError, ConfigurationError
from speechstream.models import StreamingConfig


@pytest.mark.unit
class TestStreamingConfig:
    """Test cases for StreamingConfig."""

    def test_defaults(self):
        config = StreamingConfig()

        assert config.chunk_duration_seconds == 3
        assert config.overlap_duration_seconds == 1
        assert config.language == "en"
        assert config.max_chunks == 0
        assert config.hot_word_enabled is True
        assert config.hot_word_phrase == HOT_WORD_PHRASE
        config.validate()

    def test_from_dict_merges_onto_defaults(self):
        config = StreamingConfig.from_dict({"chunk_duration_seconds": 5, "language": None, "bogus": 1})

        assert config.chunk_duration_seconds == 5
        assert config.language == "en"
        assert not hasattr(config, "bogus")

    def test_from_none(self):
        assert StreamingConfig.from_dict(None) == StreamingConfig()

    @pytest.mark.parametrize("overrides", [
        {"chunk_duration_seconds": 0},
        {"overlap_duration_seconds": -1},
        {"chunk_duration_seconds": 2, "overlap_duration_seconds": 2},
        {"chunk_duration_seconds": 1, "overlap_duration_seconds": 3},
        {"max_chunks": -1},
    ])
    def test_invalid_values_rejected(self, overrides):
        with pytest.raises(InvalidConfigError):
            StreamingConfig.from_dict(overrides).validate()

    def test_overlap_error_message(self):
        with pytest.raises(ConfigurationError, match="Overlap must be less than chunk duration"):
            StreamingConfig(chunk_duration_seconds=1, overlap_duration_seconds=1).validate()

    def test_zero_overlap_allowed(self):
        StreamingConfig(overlap_duration_seconds=0).validate()
