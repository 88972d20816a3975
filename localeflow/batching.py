"""Batching utilities for translation requests."""

from __future__ import annotations

from typing import List, Sequence

from .structures import ContentKind, TranslationBatch

DEFAULT_BATCH_SIZE = 50


def split_batches(
    texts: Sequence[str], max_batch_size: int = DEFAULT_BATCH_SIZE
) -> List[List[str]]:
    """Slice ``texts`` into consecutive chunks of at most ``max_batch_size``."""

    if max_batch_size < 1:
        raise ValueError("max_batch_size must be a positive integer.")
    return [
        list(texts[start : start + max_batch_size])
        for start in range(0, len(texts), max_batch_size)
    ]


class BatchBuilder:
    """Groups source texts into fixed-size batches for one locale pair."""

    def __init__(self, max_batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if max_batch_size < 1:
            raise ValueError("max_batch_size must be a positive integer.")
        self.max_batch_size = max_batch_size

    def build(
        self,
        texts: Sequence[str],
        *,
        source_locale: str,
        target_locale: str,
        content_kind: ContentKind = ContentKind.PLAIN,
    ) -> List[TranslationBatch]:
        return [
            TranslationBatch(
                batch_id=index,
                texts=chunk,
                source_locale=source_locale,
                target_locale=target_locale,
                content_kind=content_kind,
            )
            for index, chunk in enumerate(
                split_batches(texts, self.max_batch_size), start=1
            )
        ]
