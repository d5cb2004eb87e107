"""Keyword moderation: banned-word masking and length truncation."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from app.config import get_settings

ELLIPSIS = "..."


@dataclass(frozen=True)
class ModerationResult:
    """Outcome of moderating a transcript."""

    is_approved: bool
    moderated_text: str


class ModerationFilter:
    """Masks banned words case-insensitively, then truncates to max_length."""

    def __init__(self, banned_words: Iterable[str], max_length: int = 500) -> None:
        self.banned_words = [word for word in banned_words if word]
        self.max_length = max_length
        self._patterns = [re.compile(re.escape(word), re.IGNORECASE) for word in self.banned_words]

    def moderate(self, text: str) -> ModerationResult:
        moderated = text
        is_approved = True

        for pattern in self._patterns:
            moderated, count = pattern.subn(lambda m: "*" * len(m.group(0)), moderated)
            if count:
                is_approved = False

        # Masking runs first so a mask past the cut-off is dropped with the tail.
        if len(moderated) > self.max_length:
            moderated = moderated[: self.max_length] + ELLIPSIS

        return ModerationResult(is_approved=is_approved, moderated_text=moderated)


_moderation_filter: ModerationFilter | None = None


def get_moderation_filter() -> ModerationFilter:
    """Get singleton moderation filter built from settings."""
    global _moderation_filter
    if _moderation_filter is None:
        settings = get_settings()
        _moderation_filter = ModerationFilter(settings.banned_words(), settings.MODERATION_MAX_LENGTH)
    return _moderation_filter
