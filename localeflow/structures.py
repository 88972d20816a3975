"""Core data structures for the localeflow translator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional


class ContentKind(Enum):
    """Kind of source content; selects the instruction template."""

    PLAIN = "plain"
    HTML = "html"


@dataclass
class TranslationBatch:
    """A bounded group of source texts sent to the provider in one call."""

    batch_id: int
    texts: List[str]
    source_locale: str
    target_locale: str
    content_kind: ContentKind = ContentKind.PLAIN

    def __len__(self) -> int:
        return len(self.texts)


ProgressCallback = Callable[["ProgressCounter"], None]


@dataclass
class ProgressCounter:
    """Number of texts translated so far in one run."""

    count: int = 0
    total: int = 0
    on_advance: Optional[ProgressCallback] = field(default=None, repr=False)

    def reset(self, total: int = 0) -> None:
        self.count = 0
        self.total = total

    def advance(self, amount: int) -> None:
        if amount < 0:
            raise ValueError("Progress can only move forward.")
        self.count += amount
        if self.on_advance is not None:
            self.on_advance(self)
