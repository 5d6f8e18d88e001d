"""Speech streaming constants."""

# Phrase that ends the session and signals auto-submission when spoken.
HOT_WORD_PHRASE = "now send message"

# Vocabulary hint appended to every transcription prompt. Whisper only keeps
# the last ~224 prompt tokens, so this stays short.
WHISPER_CUSTOM_GLOSSARY = "SpeechStream"

DEFAULT_STREAMING_CONFIG = {
    "chunk_duration_seconds": 3,
    "overlap_duration_seconds": 1,
    "language": "en",
    "max_chunks": 0,
    "hot_word_enabled": True,
    "hot_word_phrase": HOT_WORD_PHRASE,
}

# Upper bound on words compared when stitching consecutive chunks.
MAX_OVERLAP_WORDS = 5

# Files below this size are incomplete segments, never sent to the API.
MIN_TRANSCRIBABLE_BYTES = 1024

START_GRACE_PERIOD_SECONDS = 0.5
STOP_GRACE_TIMEOUT_SECONDS = 2.0

CHUNK_FILE_PREFIX = "chunk_"
CHUNK_FILE_EXTENSION = ".webm"
CHUNK_FILE_PATTERN = f"{CHUNK_FILE_PREFIX}%03d{CHUNK_FILE_EXTENSION}"
