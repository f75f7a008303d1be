"""
Text Preprocessing Module for Business Card OCR
Strips scan artifacts from raw OCR text before field classification
"""

import logging
import re
from typing import List

from .models import TextBlock

logger = logging.getLogger(__name__)

# Markdown image references and provider image placeholders
IMAGE_ARTIFACT_RE = re.compile(r"!\[[^\]]*\]\([^)]*\)|img-\d+\.(?:png|jpe?g|gif)", re.IGNORECASE)
ARROW_RE = re.compile(r"[🢐🡆➔➤➜]+")
BULLET_RE = re.compile(r"^[\s#•*\-–—·>|]+")
LINE_BREAK_RE = re.compile(r"\r?\n")

HTML_ENTITIES = (
    ("&amp;", "&"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&lt;", "<"),
    ("&gt;", ">"),
)


class TextPreprocessor:
    """Cleans OCR text for the contact parser."""

    @staticmethod
    def strip_artifacts(text: str) -> str:
        """
        Remove image markers and arrow glyphs, strip leading bullets per line
        and drop empty lines.

        Args:
            text: Raw OCR text

        Returns:
            Newline-joined cleaned text
        """
        text = IMAGE_ARTIFACT_RE.sub("", text)
        text = ARROW_RE.sub("", text)
        lines = (BULLET_RE.sub("", line).strip() for line in LINE_BREAK_RE.split(text))
        return "\n".join(line for line in lines if line)

    @staticmethod
    def decode_entities(text: str) -> str:
        """Decode the handful of HTML entities OCR providers emit."""
        for entity, char in HTML_ENTITIES:
            text = text.replace(entity, char)
        return text

    @staticmethod
    def split_lines(text: str) -> List[str]:
        """Split cleaned text into trimmed, non-empty lines."""
        return [line.strip() for line in LINE_BREAK_RE.split(text) if line.strip()]

    @classmethod
    def clean(cls, text: str) -> str:
        return cls.decode_entities(cls.strip_artifacts(text or ""))


def clean_text(text: str) -> str:
    """Convenience wrapper around TextPreprocessor.clean."""
    return TextPreprocessor.clean(text)


def normalize_text(text: str) -> TextBlock:
    """
    Clean raw OCR text and derive its line sequence.

    Args:
        text: Raw OCR text (may be empty)

    Returns:
        TextBlock with the cleaned text and its lines
    """
    cleaned = TextPreprocessor.clean(text)
    lines = TextPreprocessor.split_lines(cleaned)
    logger.debug(f"Normalized text into {len(lines)} lines")
    return TextBlock(text=cleaned, lines=lines)
