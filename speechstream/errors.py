"""Exception types raised inside SpeechStream."""


class SpeechStreamError(Exception):
    """Base class for all SpeechStream errors."""


class AlreadyRecordingError(SpeechStreamError):
    """A session start was requested while another session is active."""


class NotRecordingError(SpeechStreamError):
    """Stop or cancel was requested without an active recording."""


class ConfigurationError(SpeechStreamError):
    """Configuration problem that prevents a session from starting."""


class InvalidConfigError(ConfigurationError):
    """Streaming options are inconsistent (e.g. overlap >= chunk duration)."""


class ToolUnavailableError(ConfigurationError):
    """The audio capture tool could not be found or executed."""


class CredentialsError(ConfigurationError):
    """No usable API key could be resolved from the provider profiles."""


class CaptureProcessError(SpeechStreamError):
    """The capture subprocess failed to launch or died unexpectedly."""


class TranscriptionError(SpeechStreamError):
    """The remote transcription API returned an error."""
