"""Character-by-character reveal of generated text."""
from __future__ import annotations

import time
from typing import Callable, Iterator

from app_constants import TYPING_INTERVAL_SECONDS


class TimerHandle:
    """Handle for a running reveal; cancelling it stops further ticks."""

    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True


class TypingAnimation:
    """Progressively exposes ``source_text`` through ``visible_text``."""

    def __init__(self, *, interval: float = TYPING_INTERVAL_SECONDS) -> None:
        self.interval = interval
        self.source_text = ""
        self.visible_text = ""
        self.is_typing = False
        self._index = 0
        self._handle: TimerHandle | None = None

    def start(self, text: str) -> TimerHandle:
        """Begin revealing ``text``, cancelling any reveal already running."""

        self.cancel()
        self.source_text = text or ""
        self.visible_text = ""
        self._index = 0
        handle = TimerHandle()
        self._handle = handle
        self.is_typing = bool(self.source_text)
        return handle

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.is_typing = False

    @property
    def finished(self) -> bool:
        return bool(self.source_text) and self._index >= len(self.source_text)

    def tick(self) -> bool:
        """Reveal the next character. Returns False once nothing was revealed."""

        handle = self._handle
        if not self.is_typing or handle is None or handle.cancelled:
            return False

        self._index += 1
        self.visible_text = self.source_text[: self._index]
        if self._index >= len(self.source_text):
            self.is_typing = False
            self._handle = None
        return True

    def frames(self) -> Iterator[str]:
        while self.tick():
            yield self.visible_text

    def play(self, on_frame: Callable[[str], None], *, sleep: Callable[[float], None] = time.sleep) -> bool:
        """Drive the reveal to completion; returns True if it was not cancelled."""

        for frame in self.frames():
            on_frame(frame)
            if self.is_typing:
                sleep(self.interval)
        return self.finished


def split_paragraphs(text: str) -> list[str]:
    return [block.strip() for block in (text or "").split("\n\n") if block.strip()]


__all__ = ["TimerHandle", "TypingAnimation", "split_paragraphs"]
