"""SpeechStream - streaming speech-to-text dictation with hot word auto-send."""

__version__ = "0.1.0"
