"""Translation provider abstractions."""

from __future__ import annotations

import json
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from . import messages
from .errors import (
    MissingDependencyError,
    ProviderError,
    TranslationProviderConfigurationError,
)
from .structures import ContentKind, TranslationBatch

DEFAULT_HTML_PROMPT = (
    "You are a professional translator that translates content from the %{from} "
    "locale to the %{to} locale in an i18n locale array. "
    "The input is a JSON array of strings. Translate each string and return a new "
    "array with the translated strings in the same order and of the same length. "
    "Return only the array with the translated values and nothing else. "
    "HTML markup (enclosed in < and > characters) must not be changed under any "
    "circumstance. Variables (starting with %%{ and ending with }) must not be "
    "changed under any circumstance. "
    "Keep in mind the context of all the strings for a more accurate translation."
)

DEFAULT_PLAIN_PROMPT = (
    "You are a professional translator that translates content from the %{from} "
    "locale to the %{to} locale in an i18n locale array. "
    "The input is a JSON array of plain-text strings. Translate each string and "
    "return a new array with the translated strings in the same order and of the "
    "same length. Return only the array with the translated values and nothing else. "
    "Variables (starting with %%{ and ending with }) must not be changed under any "
    "circumstance. "
    "Keep in mind the context of all the strings for a more accurate translation."
)

DEFAULT_PROMPTS: Dict[ContentKind, str] = {
    ContentKind.HTML: DEFAULT_HTML_PROMPT,
    ContentKind.PLAIN: DEFAULT_PLAIN_PROMPT,
}


@dataclass
class ProviderOptions:
    """Provider settings: client connection options plus optional overrides."""

    client_options: Dict[str, Any] = field(default_factory=dict)
    model_id: str | None = None
    system_prompt: str | None = None
    max_tokens: int = 1024
    timeout: float | None = None


class TranslationProvider(ABC):
    """Abstract adapter for translation providers."""

    name = "abstract"

    def __init__(
        self,
        options: ProviderOptions | None = None,
        *,
        debug: bool = False,
    ) -> None:
        self.options = options or ProviderOptions()
        self.debug = debug

    @abstractmethod
    def translate(self, batch: TranslationBatch) -> List[str]:
        """Translate the batch and return strings index-aligned with ``batch.texts``."""

    def system_prompt_for(self, batch: TranslationBatch) -> str:
        """Instruction for the batch's content kind, formatted with its locale pair."""

        template = self.options.system_prompt or DEFAULT_PROMPTS[batch.content_kind]
        return messages.interpolate(
            template,
            **{"from": batch.source_locale, "to": batch.target_locale},
        )

    def encode_batch(self, batch: TranslationBatch) -> str:
        return json.dumps(batch.texts, ensure_ascii=False)

    def decode_translations(self, raw_text: Any, batch: TranslationBatch) -> List[str]:
        """Parse a JSON array of strings and check it lines up with the batch."""

        if raw_text is None or not str(raw_text).strip():
            raise ProviderError(
                messages.t("provider_malformed", reason="empty response"),
                raw_response=raw_text,
            )
        raw = str(raw_text)
        try:
            payload = json.loads(self._strip_code_fence(raw))
        except json.JSONDecodeError as exc:
            raise ProviderError(
                messages.t("provider_malformed", reason=f"invalid JSON ({exc})"),
                raw_response=raw,
            ) from exc

        if isinstance(payload, dict):
            payload = payload.get("translations")
        if not isinstance(payload, list) or not all(
            isinstance(item, str) for item in payload
        ):
            raise ProviderError(
                messages.t("provider_malformed", reason="expected an array of strings"),
                raw_response=raw,
            )
        if len(payload) != len(batch):
            raise ProviderError(
                messages.t(
                    "provider_count_mismatch",
                    actual=len(payload),
                    expected=len(batch),
                ),
                raw_response=raw,
            )
        return payload

    def _strip_code_fence(self, text: str) -> str:
        """Remove leading/trailing markdown code fences if present."""

        stripped = text.strip()
        if not stripped.startswith("```"):
            return stripped

        # Drop opening fence and optional language hint.
        first_newline = stripped.find("\n")
        if first_newline == -1:
            return stripped
        body = stripped[first_newline + 1 :]
        closing_index = body.rfind("```")
        if closing_index != -1:
            body = body[:closing_index]
        return body.strip()

    def _log_debug(self, label: str, payload: Any) -> None:
        """Emit structured debug information when enabled."""

        if not self.debug:
            return
        try:
            if isinstance(payload, (dict, list)):
                message = json.dumps(payload, ensure_ascii=False, indent=2)
            else:
                message = str(payload)
        except (TypeError, ValueError):
            message = repr(payload)
        print(f"[localeflow][provider-debug] {label}:\n{message}", file=sys.stderr)


class EchoTranslationProvider(TranslationProvider):
    """A provider that returns the original text (useful for testing)."""

    name = "echo"

    def translate(self, batch: TranslationBatch) -> List[str]:
        return list(batch.texts)


class BedrockTranslationProvider(TranslationProvider):
    """Translation provider that invokes Anthropic models on Amazon Bedrock."""

    name = "bedrock"
    DEFAULT_MODEL_ID = "us.anthropic.claude-3-5-sonnet-20241022-v2:0"
    ANTHROPIC_VERSION = "bedrock-2023-05-31"

    def __init__(
        self,
        options: ProviderOptions | None = None,
        *,
        client: Any = None,
        debug: bool = False,
    ) -> None:
        super().__init__(options, debug=debug)
        self._client = client if client is not None else self._build_client()

    @property
    def model_id(self) -> str:
        return self.options.model_id or self.DEFAULT_MODEL_ID

    def _build_client(self) -> Any:
        try:
            import boto3  # type: ignore
            from botocore.config import Config  # type: ignore
        except ImportError as exc:
            raise MissingDependencyError("boto3", self.name) from exc

        client_options = dict(self.options.client_options)
        profile_name = client_options.pop("profile_name", None)
        if self.options.timeout is not None and "config" not in client_options:
            client_options["config"] = Config(read_timeout=self.options.timeout)

        session = boto3.session.Session(profile_name=profile_name)
        return session.client("bedrock-runtime", **client_options)

    def translate(self, batch: TranslationBatch) -> List[str]:
        if not batch.texts:
            return []

        body = {
            "anthropic_version": self.ANTHROPIC_VERSION,
            "max_tokens": self.options.max_tokens,
            "messages": [{"role": "user", "content": self.encode_batch(batch)}],
            "system": self.system_prompt_for(batch),
        }
        self._log_debug("provider.request.body", body)

        try:
            response = self._client.invoke_model(
                body=json.dumps(body, ensure_ascii=False),
                modelId=self.model_id,
                contentType="application/json",
                accept="application/json",
            )
            raw_body = response["body"].read()
        except Exception as exc:
            raise ProviderError(
                messages.t("provider_failed", reason=exc),
            ) from exc

        text = self._extract_text(raw_body)
        self._log_debug("provider.response.text", text)
        return self.decode_translations(text, batch)

    def _extract_text(self, raw_body: Any) -> str:
        """Return the first text content block of an Anthropic messages response."""

        try:
            body = raw_body.decode("utf-8") if isinstance(raw_body, bytes) else raw_body
        except UnicodeDecodeError as exc:
            raise ProviderError(
                messages.t("provider_malformed", reason="response body is not UTF-8"),
                raw_response=repr(raw_body),
            ) from exc
        try:
            payload = json.loads(body)
            text = payload["content"][0]["text"]
        except (json.JSONDecodeError, KeyError, IndexError, TypeError) as exc:
            raise ProviderError(
                messages.t("provider_malformed", reason="no text content block"),
                raw_response=str(body),
            ) from exc
        return text


class OpenAITranslationProvider(TranslationProvider):
    """Translation provider that uses OpenAI chat models."""

    name = "openai"
    DEFAULT_MODEL = "gpt-5-mini"

    def __init__(
        self,
        options: ProviderOptions | None = None,
        *,
        client: Any = None,
        debug: bool = False,
    ) -> None:
        super().__init__(options, debug=debug)
        self._client = client if client is not None else self._build_client()

    @property
    def model_id(self) -> str:
        return self.options.model_id or self.DEFAULT_MODEL

    def _build_client(self) -> Any:
        client_options = dict(self.options.client_options)
        if not client_options.get("api_key"):
            raise TranslationProviderConfigurationError(
                "OpenAI configuration missing. Set OPENAI_API_KEY or choose a "
                "different provider."
            )
        try:
            from openai import OpenAI  # type: ignore
        except ImportError as exc:
            raise MissingDependencyError("openai", self.name) from exc

        if self.options.timeout is not None:
            client_options.setdefault("timeout", self.options.timeout)
        return OpenAI(**client_options)

    def translate(self, batch: TranslationBatch) -> List[str]:
        if not batch.texts:
            return []

        system_prompt = self.system_prompt_for(batch)
        user_content = self.encode_batch(batch)
        self._log_debug("provider.request.system_prompt", system_prompt)
        self._log_debug("provider.request.payload", user_content)

        try:
            response = self._client.chat.completions.create(
                model=self.model_id,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_content},
                ],
            )
        except Exception as exc:
            raise ProviderError(
                messages.t("provider_failed", reason=exc),
            ) from exc

        content = self._first_message_content(response)
        self._log_debug("provider.response.content", content)
        return self.decode_translations(content, batch)

    def _first_message_content(self, response: Any) -> Optional[str]:
        choices = getattr(response, "choices", None) or []
        for choice in choices:
            message = getattr(choice, "message", None)
            content = getattr(message, "content", None)
            if content:
                return str(content)
        return None


def build_provider(
    name: str | None,
    options: ProviderOptions | None = None,
    *,
    debug: bool = False,
) -> TranslationProvider:
    """Factory to create providers by name."""

    normalized = (name or "bedrock").strip().lower()
    if normalized in {"bedrock", "aws", "aws-bedrock", "aws_bedrock"}:
        return BedrockTranslationProvider(options, debug=debug)
    if normalized in {"openai", "gpt"}:
        return OpenAITranslationProvider(options, debug=debug)
    if normalized in {"echo", "noop", "mock"}:
        return EchoTranslationProvider(options, debug=debug)
    raise TranslationProviderConfigurationError(
        messages.t("unknown_provider", name=name)
    )
