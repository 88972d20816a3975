"""Prepper-backed configuration loader for localeflow."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Sequence, Tuple

from dotenv import dotenv_values
from prepper import (
    ConfigNotFound,
    Field,
    IoError,
    SchemaError,
    SchemaModel,
    ValidationError,
    model_validator,
)
from prepper.config import ConfigInstance
from prepper.loaders import _parse_file, _path_to_source, discover_file_paths
from prepper.merge import merge_layer
from prepper.provenance import ProvenanceRecorder

from .batching import DEFAULT_BATCH_SIZE
from .errors import InvalidLocaleError, TranslationProviderConfigurationError
from .locales import explode_list, validate_locale
from .providers import ProviderOptions

APP_NAME = "Localeflow"
CONFIG_ERROR_HEADER = "Configuration validation errors detected:"

PROVIDER_SYNONYMS = {
    "aws": "bedrock",
    "aws_bedrock": "bedrock",
    "gpt": "openai",
    "open_ai": "openai",
    "noop": "echo",
    "mock": "echo",
}


class LocaleflowConfig(SchemaModel):
    """Schema describing all supported configuration options."""

    LOCALEFLOW_BASE_LOCALE: str = Field(
        default="en",
        description="Reference locale; source of translations and target of the 'base' alias.",
    )
    LOCALEFLOW_LOCALES: str | None = Field(
        default=None,
        description="Comma-separated list of the project's locales.",
    )
    TRANSLATION_PROVIDER: Literal["bedrock", "openai", "echo"] = Field(
        default="bedrock",
        description="Translation backend selection.",
    )
    TRANSLATION_BATCH_SIZE: int = Field(default=DEFAULT_BATCH_SIZE)
    TRANSLATION_MODEL: str | None = Field(default=None)
    TRANSLATION_SYSTEM_PROMPT: str | None = Field(
        default=None,
        description="Instruction template override; may use %{from} and %{to}.",
    )
    TRANSLATION_MAX_TOKENS: int = Field(default=1024)
    TRANSLATION_TIMEOUT: float | None = Field(default=None)
    AWS_REGION: str | None = Field(default=None)
    AWS_PROFILE: str | None = Field(default=None)
    OPENAI_API_KEY: str | None = Field(default=None, secret=True)
    LOCALEFLOW_PROVIDER_DEBUG: bool = Field(default=False)

    @model_validator(mode="before")
    def _normalise_provider(data: Any) -> Any:
        if isinstance(data, dict):
            raw_value = data.get("TRANSLATION_PROVIDER")
            if isinstance(raw_value, str):
                normalized = raw_value.strip().lower().replace("-", "_")
                data["TRANSLATION_PROVIDER"] = PROVIDER_SYNONYMS.get(
                    normalized, normalized
                )
        return data


@lru_cache(maxsize=1)
def _load_config_instance(app_dir: Path | None = None) -> ConfigInstance:
    """Load configuration layers once and cache the immutable instance."""

    base_dir = app_dir or Path.cwd()
    try:
        provenance = ProvenanceRecorder()
        combined = _load_config_files(app_dir=base_dir, provenance=provenance)
        _merge_environment(combined, provenance=provenance, app_dir=base_dir)

        model = LocaleflowConfig.validate(combined, provenance=provenance)
        _validate_settings(model)

        return ConfigInstance(
            model=model,
            provenance=provenance,
            env_prefix=None,
            schema_cls=LocaleflowConfig,
        )
    except ConfigNotFound as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration files could not be found: {exc}"
        ) from exc
    except IoError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration files could not be read: {exc}"
        ) from exc
    except SchemaError as exc:
        raise TranslationProviderConfigurationError(
            f"Configuration schema error: {exc}"
        ) from exc
    except ValidationError as exc:
        raise _config_error([_describe_issue(entry) for entry in exc.to_dict()]) from exc


def _config_error(problems: Sequence[str]) -> TranslationProviderConfigurationError:
    lines = [CONFIG_ERROR_HEADER]
    lines.extend(f"- {problem}" for problem in problems)
    return TranslationProviderConfigurationError("\n".join(lines))


def _file_layer(path: Path, parsed: Any) -> dict[str, Any]:
    """Turn one parsed YAML file into a layer; locales may be given as a YAML list."""

    if not isinstance(parsed, Mapping):
        raise IoError(
            f"Invalid configuration file {path}: expected a mapping at the root."
        )
    layer = dict(parsed)
    locales = layer.get("LOCALEFLOW_LOCALES")
    if isinstance(locales, (list, tuple)):
        layer["LOCALEFLOW_LOCALES"] = ",".join(str(locale) for locale in locales)
    return layer


def _load_config_files(*, app_dir: Path, provenance: ProvenanceRecorder) -> dict[str, Any]:
    combined: dict[str, Any] = {}
    discovered = discover_file_paths(APP_NAME, "yaml", app_dir=app_dir, extra_paths=None)
    for path, label in discovered:
        merge_layer(
            combined,
            _file_layer(path, _parse_file(path, "yaml")),
            provenance=provenance,
            source=_path_to_source(label, "yaml", path),
            layer="file",
        )
    return combined


def _environment_layers(app_dir: Path) -> List[Tuple[str, Mapping[str, Any]]]:
    layers: List[Tuple[str, Mapping[str, Any]]] = []
    dotenv_path = app_dir / ".env"
    if dotenv_path.is_file():
        layers.append((".env", dotenv_values(dotenv_path)))
    layers.append(("process", os.environ))
    return layers


def _merge_environment(
    target: dict[str, Any],
    *,
    provenance: ProvenanceRecorder,
    app_dir: Path,
) -> None:
    """Overlay variables named after LocaleflowConfig fields; process env wins over .env."""

    field_names = sorted(LocaleflowConfig.__field_infos__)
    for label, values in _environment_layers(app_dir):
        for name in field_names:
            value = values.get(name)
            if not isinstance(value, str):
                continue
            merge_layer(
                target,
                {name: value},
                provenance=provenance,
                source=f"env:{label}:{name}",
                layer="env",
            )


def _validate_settings(settings: LocaleflowConfig) -> None:
    errors: list[str] = []

    try:
        validate_locale(settings.LOCALEFLOW_BASE_LOCALE)
    except InvalidLocaleError as exc:
        errors.append(f"LOCALEFLOW_BASE_LOCALE: {exc}")
    for locale in explode_list([settings.LOCALEFLOW_LOCALES or ""]):
        try:
            validate_locale(locale)
        except InvalidLocaleError as exc:
            errors.append(f"LOCALEFLOW_LOCALES: {exc}")

    if settings.TRANSLATION_BATCH_SIZE < 1:
        errors.append("TRANSLATION_BATCH_SIZE must be a positive integer.")

    if settings.TRANSLATION_PROVIDER == "openai" and not settings.OPENAI_API_KEY:
        errors.append(
            "OPENAI_API_KEY is required when TRANSLATION_PROVIDER is 'openai'."
        )

    if errors:
        raise _config_error(errors)


def _describe_issue(entry: Mapping[str, Any]) -> str:
    path = entry.get("path") or []
    if isinstance(path, (list, tuple)):
        field_name = ".".join(str(part) for part in path if part not in (None, ""))
    else:
        field_name = str(path)
    text = str(entry.get("message") or entry.get("msg") or "Invalid value")
    if field_name:
        text = f"{field_name}: {text}"
    if entry.get("source"):
        text += f" (source: {entry['source']})"
    return text


def configured_locales(settings: LocaleflowConfig) -> List[str]:
    """Every project locale, base locale first, without duplicates."""

    locales: List[str] = [settings.LOCALEFLOW_BASE_LOCALE]
    for locale in explode_list([settings.LOCALEFLOW_LOCALES or ""]):
        if locale not in locales:
            locales.append(locale)
    return locales


def provider_options(
    settings: LocaleflowConfig, provider_name: str | None = None
) -> ProviderOptions:
    """Build the options block handed to the selected provider."""

    raw_name = (provider_name or settings.TRANSLATION_PROVIDER).strip().lower()
    normalized = PROVIDER_SYNONYMS.get(raw_name.replace("-", "_"), raw_name)

    client_options: Dict[str, Any] = {}
    if normalized == "bedrock":
        if settings.AWS_REGION:
            client_options["region_name"] = settings.AWS_REGION
        if settings.AWS_PROFILE:
            client_options["profile_name"] = settings.AWS_PROFILE
    elif normalized == "openai":
        client_options["api_key"] = settings.OPENAI_API_KEY

    return ProviderOptions(
        client_options=client_options,
        model_id=settings.TRANSLATION_MODEL or None,
        system_prompt=settings.TRANSLATION_SYSTEM_PROMPT or None,
        max_tokens=settings.TRANSLATION_MAX_TOKENS,
        timeout=settings.TRANSLATION_TIMEOUT,
    )


def get_config(app_dir: Path | None = None) -> ConfigInstance:
    """Return the immutable configuration instance."""

    return _load_config_instance(app_dir=app_dir)


def get_settings(app_dir: Path | None = None) -> LocaleflowConfig:
    """Return the validated schema model for typed access."""

    return get_config(app_dir=app_dir).model()
