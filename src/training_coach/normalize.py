"""Text normalization for card matching.

Policy:
- Apply NFC early for consistency.
- For matching: casefold, drop apostrophes, turn other punctuation into
  spaces, collapse whitespace and trim.
"""

from __future__ import annotations

import re
import unicodedata as ud
from typing import List

_WS_RE = re.compile(r"\s+")
_APOSTROPHES = {"'", "’", "ʼ"}


def normalize_text_nfc(text: str) -> str:
    """Apply Unicode NFC to input text (safe for None-like inputs)."""
    if text is None:
        return ""
    return ud.normalize("NFC", str(text))


def _strip_punctuation(text: str) -> str:
    # "don't" -> "dont"; any other 'P*' character becomes a space.
    out = []
    for ch in text:
        if ch in _APOSTROPHES:
            continue
        out.append(" " if ud.category(ch).startswith("P") else ch)
    return "".join(out)


def normalize_for_match(text: str) -> str:
    """Normalize card text for comparison.

    Steps: NFC -> casefold -> strip punctuation -> collapse whitespace and trim.
    """
    if not text:
        return ""
    t = normalize_text_nfc(text)
    t = t.casefold()
    t = _strip_punctuation(t)
    t = _WS_RE.sub(" ", t).strip()
    return t


def tokenize(text: str) -> List[str]:
    """Split normalized text into word tokens."""
    normalized = normalize_for_match(text)
    return normalized.split() if normalized else []
