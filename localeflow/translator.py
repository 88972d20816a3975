"""High-level orchestration of batched translation."""

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Sequence

from . import messages
from .batching import DEFAULT_BATCH_SIZE, BatchBuilder
from .errors import NoResultsError, OrchestrationError, ProviderError
from .providers import TranslationProvider
from .structures import ContentKind, ProgressCounter, TranslationBatch

logger = logging.getLogger(__name__)


class TranslationOrchestrator:
    """Splits texts into batches, dispatches them in order and reassembles the results.

    Batches run sequentially on the calling thread. A failing batch aborts the
    run; nothing is retried here.
    """

    def __init__(
        self,
        provider: TranslationProvider,
        *,
        max_batch_size: int = DEFAULT_BATCH_SIZE,
        progress: Optional[ProgressCounter] = None,
    ) -> None:
        self.provider = provider
        self.batch_builder = BatchBuilder(max_batch_size)
        self.progress = progress if progress is not None else ProgressCounter()

    @property
    def max_batch_size(self) -> int:
        return self.batch_builder.max_batch_size

    def translate_all(
        self,
        texts: Sequence[str],
        source_locale: str,
        target_locale: str,
        content_kind: ContentKind = ContentKind.PLAIN,
    ) -> List[str]:
        """Translate ``texts`` and return the results in the original order."""

        self.progress.reset(total=len(texts))
        if not texts:
            return []

        batches = self.batch_builder.build(
            texts,
            source_locale=source_locale,
            target_locale=target_locale,
            content_kind=content_kind,
        )
        logger.debug(
            "Prepared %d texts in %d batches (%s -> %s).",
            len(texts),
            len(batches),
            source_locale,
            target_locale,
        )

        results: List[str] = []
        for batch in batches:
            translated = self._process_batch(batch)
            results.extend(translated)
            self.progress.advance(len(translated))

        # Only reachable when a provider bypasses the per-batch count check.
        if not results:
            raise NoResultsError()
        return results

    def translate_values(
        self,
        values: Mapping[str, str],
        source_locale: str,
        target_locale: str,
        content_kind: ContentKind = ContentKind.PLAIN,
    ) -> Dict[str, str]:
        """Translate a key/value mapping, keeping each translation under its key."""

        keys = list(values.keys())
        translated = self.translate_all(
            [values[key] for key in keys],
            source_locale,
            target_locale,
            content_kind,
        )
        return dict(zip(keys, translated))

    def _process_batch(self, batch: TranslationBatch) -> List[str]:
        try:
            translated = self.provider.translate(batch)
            if len(translated) != len(batch):
                raise ProviderError(
                    messages.t(
                        "provider_count_mismatch",
                        actual=len(translated),
                        expected=len(batch),
                    )
                )
        except ProviderError as exc:
            logger.debug("Batch %d failed: %s", batch.batch_id, exc)
            raise OrchestrationError(exc, batch_id=batch.batch_id) from exc

        logger.debug(
            "Processed batch %d (%d texts, %d/%d done).",
            batch.batch_id,
            len(batch),
            self.progress.count + len(translated),
            self.progress.total,
        )
        return list(translated)
