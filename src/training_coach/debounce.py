"""Caller-side helpers so only the latest duplicate check is applied.

The similarity engine itself is synchronous and stateless. While a card is
being typed, checks are scheduled after a pause; a newer keystroke cancels
the pending check, and a result is only delivered if no newer request was
issued in the meantime.
"""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Iterable, List, Optional

from .detect_duplicates import MIN_DRAFT_LENGTH, find_similar
from .models import CardWithContext, SimilarityResult

DEFAULT_DELAY = 0.5


class RequestGate:
    """Monotonic request counter; stale tokens are refused."""

    def __init__(self) -> None:
        self._latest = 0

    @property
    def latest(self) -> int:
        return self._latest

    def issue(self) -> int:
        self._latest += 1
        return self._latest

    def is_current(self, token: int) -> bool:
        return token == self._latest

    def adopt(self, token: int, result: Any, apply: Callable[[Any], None]) -> bool:
        """Call ``apply(result)`` only if ``token`` is still the latest."""
        if not self.is_current(token):
            return False
        apply(result)
        return True


class Debouncer:
    """Run a callable once input has been quiet for ``delay`` seconds."""

    def __init__(self, delay: float = DEFAULT_DELAY, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, fn: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, fn, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, fn: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        fn(*args)


class DuplicateWatcher:
    """Watch a draft's text and report near-duplicates after typing pauses.

    ``on_results`` receives the list of SimilarityResult for the most recent
    text only; short drafts clear the results immediately.
    """

    def __init__(
        self,
        candidates: Iterable[CardWithContext],
        threshold: float,
        on_results: Callable[[List[SimilarityResult]], None],
        *,
        delay: float = DEFAULT_DELAY,
        min_length: int = MIN_DRAFT_LENGTH,
        limit: Optional[int] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self.candidates = list(candidates)
        self.threshold = threshold
        self.min_length = min_length
        self.limit = limit
        self._on_results = on_results
        self._gate = RequestGate()
        self._debouncer = Debouncer(delay, loop=loop)

    def text_changed(self, text: str) -> None:
        token = self._gate.issue()
        if len(text.strip()) < self.min_length:
            self._debouncer.cancel()
            self._gate.adopt(token, [], self._on_results)
            return
        self._debouncer.schedule(self._run, token, text)

    def close(self) -> None:
        self._debouncer.cancel()
        self._gate.issue()

    def _run(self, token: int, text: str) -> None:
        if not self._gate.is_current(token):
            return
        results = find_similar(
            text, self.candidates, self.threshold, min_length=self.min_length, limit=self.limit
        )
        self._gate.adopt(token, results, self._on_results)
