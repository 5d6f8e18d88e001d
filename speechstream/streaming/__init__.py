"""Transcript stitching and hot word detection."""

from .dedup import deduplicate_overlap
from .hot_word import check_hot_word
from .manager import StreamingManager

__all__ = [
    "deduplicate_overlap",
    "check_hot_word",
    "StreamingManager",
]
