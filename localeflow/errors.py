"""Error definitions for the localeflow translator."""

from __future__ import annotations

from typing import Any, Optional

from . import messages


class LocaleflowError(Exception):
    """Base exception for all custom errors."""

    kind = "error"

    def __init__(self, message: str | None = None, **data: Any) -> None:
        self.data = data
        super().__init__(message or messages.t(self.kind, **data))


class InvalidLocaleError(LocaleflowError):
    """Raised when a locale token does not match the locale grammar."""

    kind = "invalid_locale"

    def __init__(self, locale: Any) -> None:
        self.locale = locale
        super().__init__(invalid=locale)


class NoLocalesError(LocaleflowError):
    """Raised when a command resolves to an empty locale set."""

    kind = "no_locales"


class NoResultsError(LocaleflowError):
    """Raised when a non-empty translation run produced no strings."""

    kind = "no_results"


class TranslationProviderConfigurationError(LocaleflowError):
    """Raised when the translation provider is misconfigured."""

    kind = "provider_configuration"


class MissingDependencyError(TranslationProviderConfigurationError):
    """Raised when a provider's optional client library is not installed."""

    kind = "missing_dependency"

    def __init__(self, package: str, provider: str) -> None:
        self.package = package
        self.provider = provider
        super().__init__(package=package, provider=provider)


class ProviderError(LocaleflowError):
    """Raised when the translation provider fails or answers malformed data."""

    kind = "provider_failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        raw_response: Optional[str] = None,
        **data: Any,
    ) -> None:
        self.raw_response = raw_response
        super().__init__(message, **data)


class OrchestrationError(ProviderError):
    """Raised when a batch fails during orchestration; remaining batches are skipped."""

    kind = "batch_failed"

    def __init__(self, cause: ProviderError, *, batch_id: int) -> None:
        self.cause = cause
        self.batch_id = batch_id
        super().__init__(
            raw_response=cause.raw_response,
            batch=batch_id,
            reason=str(cause),
        )
