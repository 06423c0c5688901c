"""Training-coach card engine.

Near-duplicate warnings, fuzzy search and priority ranking over a
collection of training cards (decks -> sections -> cards).
"""

__all__ = [
    "models",
    "normalize",
    "similarity",
    "detect_duplicates",
    "fuzzy_filter",
    "search",
    "ranking",
    "debounce",
    "deck_index",
    "config",
    "ingest",
    "report",
]
