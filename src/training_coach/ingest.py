"""CSV ingest for draft cards and a generic CSV writer.

Schema: content, tags (UTF-8, quoted fields ok). Tags are space-separated
and may be empty.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple


@dataclass
class DraftRow:
    content: str
    tags: Tuple[str, ...] = ()


def parse_tags(tags_string: str) -> Tuple[str, ...]:
    if not tags_string:
        return ()
    return tuple(t for t in tags_string.split() if t)


def read_drafts_csv(path: str | Path) -> List[DraftRow]:
    path = Path(path)
    rows: List[DraftRow] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if "content" not in {h.lower() for h in reader.fieldnames or []}:
            raise ValueError(f"Missing required columns in {path}: ['content']")
        for r in reader:
            rows.append(DraftRow(content=r.get("content") or "", tags=parse_tags(r.get("tags") or "")))
    return rows


def write_csv(path: str | Path, rows: Iterable[dict]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    rows = list(rows)
    if not rows:
        # Write empty file with no rows
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write("")
        return
    fieldnames = list(rows[0].keys())
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for r in rows:
            writer.writerow(r)
