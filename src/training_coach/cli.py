"""CLI entrypoint for the training-coach card engine.

Usage:
  training-coach check --text "Keep left shoulder down" --out out/duplicates.csv
  training-coach lint-deck --out out/internal_duplicates.csv
  training-coach search --query "shoulder" --deck backspin
  training-coach priorities --discipline Spins --others
"""

from __future__ import annotations

import argparse
from typing import List

from .config import DEFAULT_CONFIG_PATH, EngineConfig, load_config
from .deck_index import Collection, load_collection
from .detect_duplicates import candidates_with_tags, exclude_card, find_internal_duplicates, find_similar
from .ingest import read_drafts_csv
from .models import DISCIPLINES
from .ranking import PriorityFilter, get_other_discipline_priorities, get_prioritized
from .report import (
    print_duplicate_summary,
    print_internal_summary,
    print_priority_list,
    print_search_hits,
    write_duplicates_csv,
    write_internal_csv,
)
from .search import SearchFilters, search_cards


def _load(args: argparse.Namespace) -> tuple[EngineConfig, Collection]:
    cfg = load_config(args.config)
    collection_path = args.collection or cfg.collection_path
    collection = load_collection(collection_path)
    print(f"Loaded {len(collection)} cards from {len(collection.decks)} decks ({collection_path})")
    return cfg, collection


def cmd_check(args: argparse.Namespace) -> int:
    """Warn about existing cards similar to one or more drafts."""
    if not args.text and not args.input:
        print("Error: one of --text or --input is required")
        return 1
    try:
        cfg, collection = _load(args)
        if args.text:
            drafts = [(args.text, tuple(args.tag or ()))]
        else:
            drafts = [(row.content, row.tags) for row in read_drafts_csv(args.input)]
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    threshold = args.threshold if args.threshold is not None else cfg.duplicate_threshold
    candidates = collection.cards_with_context()
    if args.exclude_card:
        candidates = exclude_card(candidates, args.exclude_card)

    checks = []
    for text, tags in drafts:
        pool = candidates_with_tags(candidates, any_of=tags) if args.same_tags and tags else candidates
        try:
            results = find_similar(
                text,
                pool,
                threshold,
                min_length=cfg.min_draft_length,
                limit=None if args.all else cfg.duplicate_display_limit,
            )
        except ValueError as e:
            print(f"Error: {e}")
            return 1
        checks.append((text, results))
        print_duplicate_summary(text, results)

    flagged = sum(1 for _, results in checks if results)
    print(f"Drafts with similar cards: {flagged} of {len(checks)} (threshold {threshold:g})")
    if args.out:
        write_duplicates_csv(args.out, checks)
        print(f"Wrote report: {args.out}")
    return 0


def cmd_lint_deck(args: argparse.Namespace) -> int:
    """Analyze the collection itself for internal near-duplicates."""
    try:
        cfg, collection = _load(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    threshold = args.threshold if args.threshold is not None else cfg.duplicate_threshold
    try:
        cards = collection.cards_with_context(args.deck)
    except KeyError as e:
        print(f"Error: {e.args[0]}")
        return 1
    print("Analyzing collection for internal duplicates...")
    try:
        found = find_internal_duplicates(cards, threshold)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    write_internal_csv(args.out, found)
    print_internal_summary(found, len(cards))
    print(f"Wrote report: {args.out}")
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    try:
        cfg, collection = _load(args)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    filters = SearchFilters(
        discipline=args.discipline,
        deck_id=args.deck,
        section_title=args.section,
        tags=tuple(args.tag or ()),
    )
    if args.deck:
        try:
            collection.deck(args.deck)
        except KeyError as e:
            print(f"Error: {e.args[0]}")
            return 1
    threshold = args.threshold if args.threshold is not None else cfg.search_threshold
    hits = search_cards(args.query, collection.cards_with_context(), threshold, filters)
    if args.limit is not None:
        hits = hits[: args.limit]
    print_search_hits(args.query, hits)
    return 0


def cmd_priorities(args: argparse.Namespace) -> int:
    """Show dashboard priority cards for a discipline."""
    if args.others and not args.discipline:
        print("Error: --others requires --discipline")
        return 1
    try:
        cfg, collection = _load(args)
        limit = args.limit if args.limit is not None else cfg.priority_limit
        priority_filter = PriorityFilter(discipline=args.discipline, limit=limit)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}")
        return 1

    cards = collection.cards_with_context()
    top = get_prioritized(cards, priority_filter, cfg.excluded_priority_sections)
    print_priority_list(f"Priority cards ({args.discipline or 'all disciplines'})", top)

    if args.others:
        others = get_other_discipline_priorities(
            cards,
            args.discipline,
            per_discipline_limit=cfg.other_discipline_limit,
            limit=cfg.other_discipline_limit,
            excluded_sections=cfg.excluded_priority_sections,
        )
        print()
        print_priority_list("Reminders from other disciplines", others)
    return 0


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to config.json (optional; defaults will be used if missing; default: {DEFAULT_CONFIG_PATH})",
    )
    p.add_argument(
        "--collection",
        help="Path to the collection JSON export (default: collection_path from config)",
    )


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="training-coach", description="Training coach card engine CLI")
    sub = p.add_subparsers(dest="cmd", required=True)

    check = sub.add_parser("check", help="Warn about existing cards similar to draft text")
    _add_common(check)
    check.add_argument("--text", help="Draft card text to check")
    check.add_argument("--tag", action="append", help="Tag of the draft (repeatable; used with --same-tags)")
    check.add_argument("--input", help="Path to draft CSV (content,tags)")
    check.add_argument("--out", help="Path to output CSV report")
    check.add_argument("--threshold", type=float, help="Similarity threshold 0-100 (default: config duplicate_threshold)")
    check.add_argument("--exclude-card", help="Id of the card being edited (never reported)")
    check.add_argument(
        "--same-tags",
        action="store_true",
        help="Only compare against cards sharing at least one of the draft's tags",
    )
    check.add_argument("--all", action="store_true", help="Report every match, not just the top few")
    check.set_defaults(func=cmd_check)

    lint_deck = sub.add_parser("lint-deck", help="Find near-duplicate cards inside the collection")
    _add_common(lint_deck)
    lint_deck.add_argument("--out", required=True, help="Path to output CSV report")
    lint_deck.add_argument("--deck", help="Restrict the scan to one deck id")
    lint_deck.add_argument("--threshold", type=float, help="Similarity threshold 0-100 (default: config duplicate_threshold)")
    lint_deck.set_defaults(func=cmd_lint_deck)

    search = sub.add_parser("search", help="Fuzzy text/tag search across the collection")
    _add_common(search)
    search.add_argument("--query", required=True, help="Search text (empty shows newest cards)")
    search.add_argument("--deck", help="Restrict to one deck id")
    search.add_argument("--discipline", choices=DISCIPLINES, help="Restrict to one discipline")
    search.add_argument("--section", help="Restrict to one section title")
    search.add_argument("--tag", action="append", help="Restrict to cards with any of these tags (repeatable)")
    search.add_argument("--threshold", type=float, help="Fuzzy threshold 0-100 (default: config search_threshold)")
    search.add_argument("--limit", type=int, help="Show at most this many hits")
    search.set_defaults(func=cmd_search)

    prio = sub.add_parser("priorities", help="Rank priority cards for the dashboard")
    _add_common(prio)
    prio.add_argument("--discipline", choices=DISCIPLINES, help="Focus discipline (default: all)")
    prio.add_argument("--limit", type=int, help="Maximum cards (default: config priority_limit)")
    prio.add_argument(
        "--others",
        action="store_true",
        help="Also show priority reminders from the other disciplines",
    )
    prio.set_defaults(func=cmd_priorities)

    return p


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
