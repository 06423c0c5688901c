"""Engine configuration loaded from JSON.

Thresholds and limits are policy owned by the calling application. Defaults
come from the modules that apply them, so a missing config file and a direct
library call behave the same.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Tuple

from .debounce import DEFAULT_DELAY
from .detect_duplicates import MIN_DRAFT_LENGTH
from .ranking import (
    DEFAULT_EXCLUDED_SECTIONS,
    DEFAULT_OTHER_DISCIPLINE_LIMIT,
    DEFAULT_PRIORITY_LIMIT,
    DEFAULT_RESTRICTED_VIEW_SECTIONS,
)

DEFAULT_CONFIG_PATH = "resources/config.json"


@dataclass(frozen=True)
class EngineConfig:
    """Policy values used by the CLI and other callers.

    Attributes:
        collection_path: JSON export of the card store
        duplicate_threshold: Minimum similarity for a duplicate warning
        search_threshold: Minimum similarity for a fuzzy search hit
        min_draft_length: Drafts shorter than this are not checked
        debounce_seconds: Quiet period before a duplicate check runs
        priority_limit: Dashboard priority cards for the focus discipline
        other_discipline_limit: Reminders from other disciplines
        excluded_priority_sections: Sections never surfaced as priorities
        restricted_view_sections: Sections with no priority view in a deck
        duplicate_display_limit: Duplicate warnings shown per draft
    """
    collection_path: str = "resources/collection.json"
    duplicate_threshold: float = 70.0
    search_threshold: float = 60.0
    min_draft_length: int = MIN_DRAFT_LENGTH
    debounce_seconds: float = DEFAULT_DELAY
    priority_limit: int = DEFAULT_PRIORITY_LIMIT
    other_discipline_limit: int = DEFAULT_OTHER_DISCIPLINE_LIMIT
    excluded_priority_sections: Tuple[str, ...] = DEFAULT_EXCLUDED_SECTIONS
    restricted_view_sections: Tuple[str, ...] = DEFAULT_RESTRICTED_VIEW_SECTIONS
    duplicate_display_limit: int = 3

    def __post_init__(self) -> None:
        for name in ("duplicate_threshold", "search_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be between 0 and 100, got {value}")
        for name in ("min_draft_length", "priority_limit", "other_discipline_limit", "duplicate_display_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ValueError(f"{name} must be a non-negative integer, got {value!r}")
        if self.debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {self.debounce_seconds}")
        object.__setattr__(self, "excluded_priority_sections", tuple(self.excluded_priority_sections))
        object.__setattr__(self, "restricted_view_sections", tuple(self.restricted_view_sections))


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> EngineConfig:
    """Load engine config; built-in defaults are used when the file is missing.

    Raises:
        ValueError: If the JSON is invalid, has unknown keys or bad values
    """
    path = Path(path)
    if not path.exists():
        return EngineConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file: {e}")
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a JSON object: {path}")

    known = {f.name for f in fields(EngineConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {sorted(unknown)}")
    return EngineConfig(**data)
