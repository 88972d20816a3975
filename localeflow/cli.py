"""Command line interface for the localeflow translator."""

from __future__ import annotations

import argparse
import json
import logging
import pathlib
import sys
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from . import messages
from .configuration import configured_locales, get_settings, provider_options
from .errors import (
    LocaleflowError,
    NoLocalesError,
    ProviderError,
    TranslationProviderConfigurationError,
)
from .locales import LocaleResolver
from .providers import ProviderOptions, TranslationProvider, build_provider
from .structures import ContentKind, ProgressCounter
from .translator import TranslationOrchestrator

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] %(name)s: %(message)s"


@dataclass
class TranslationSummary:
    """Report returned after translating an input file."""

    input_path: pathlib.Path
    output_path: pathlib.Path | None
    source_locale: str
    target_locales: List[str]
    total_texts: int
    translated_texts: int
    provider_name: str
    model: str | None
    elapsed_seconds: float
    results: Dict[str, Any] = field(default_factory=dict, repr=False)


def positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="localeflow",
        description=(
            "Machine-translate i18n strings into one or more locales while "
            "preserving markup and %{placeholders}."
        ),
    )
    parser.add_argument(
        "input_file",
        help="JSON file holding an array of strings or an object of key/string pairs.",
    )
    parser.add_argument(
        "-l",
        "--locales",
        default="all",
        help="Target locales separated by ',', ':' or '+', or 'all' (default: all).",
    )
    parser.add_argument(
        "-f",
        "--from",
        dest="source_locale",
        default="base",
        help="Source locale, or 'base' for the configured base locale (default: base).",
    )
    parser.add_argument(
        "-p",
        "--provider",
        help="Translation provider identifier (bedrock, openai, echo).",
    )
    parser.add_argument(
        "-m",
        "--model",
        help="Provider-specific model or engine identifier.",
    )
    parser.add_argument(
        "-b",
        "--batch-size",
        type=positive_int,
        help="Maximum number of strings per provider request.",
    )
    parser.add_argument(
        "--html",
        action="store_true",
        help="Treat the strings as HTML and keep markup untouched.",
    )
    parser.add_argument(
        "-o",
        "--output",
        help="Write the JSON results to this path instead of standard output.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show detailed progress information.",
    )
    parser.add_argument(
        "--debug-provider",
        action="store_true",
        help="Log complete provider requests and responses for troubleshooting.",
    )
    parser.add_argument(
        "--message-locale",
        default=messages.DEFAULT_LOCALE,
        help="Locale of error messages (default: en).",
    )
    return parser


def setup_logging(verbose: bool) -> None:
    root = logging.getLogger("localeflow")
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if root.handlers:
        return
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, "%Y-%m-%d %H:%M:%S"))
    root.addHandler(handler)


def load_texts(input_path: pathlib.Path) -> Any:
    """Read the input file; returns a list of strings or a dict of strings."""

    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise LocaleflowError(f"Input file not found: {input_path}") from exc
    except UnicodeDecodeError as exc:
        raise LocaleflowError(f"Input file is not valid UTF-8: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise LocaleflowError(f"Input file is not valid JSON: {exc}") from exc
    except OSError as exc:
        raise LocaleflowError(f"Input file could not be read: {exc}") from exc

    if isinstance(data, list) and all(isinstance(item, str) for item in data):
        return data
    if isinstance(data, dict) and all(isinstance(value, str) for value in data.values()):
        return data
    raise LocaleflowError(
        "Input file must hold an array of strings or an object of string values."
    )


def execute_translation(
    *,
    input_file: str,
    output_file: str | None,
    locales: str | None,
    source_locale: str | None,
    resolver: LocaleResolver,
    provider_name: str | None,
    options: ProviderOptions,
    batch_size: int,
    content_kind: ContentKind,
    verbose: bool,
    provider_debug: bool,
    provider: TranslationProvider | None = None,
) -> tuple[int, TranslationSummary | None, str | None]:
    """Execute a translation run and return the exit code, summary, and message."""

    start_time = time.time()
    input_path = pathlib.Path(input_file).expanduser().resolve()
    output_path = (
        pathlib.Path(output_file).expanduser().resolve() if output_file else None
    )

    try:
        texts = load_texts(input_path)
        source = resolver.resolve_single(source_locale)
        targets = [
            locale for locale in resolver.resolve(locales) if locale != source
        ]
        if not targets:
            raise NoLocalesError()
        if provider is None:
            provider = build_provider(provider_name, options, debug=provider_debug)
    except LocaleflowError as exc:
        return 1, None, str(exc)

    progress = ProgressCounter(on_advance=_progress_printer(verbose))
    orchestrator = TranslationOrchestrator(
        provider,
        max_batch_size=batch_size,
        progress=progress,
    )

    results: Dict[str, Any] = {}
    translated_texts = 0
    try:
        for target in targets:
            if verbose:
                print(f"Translating {len(texts)} strings {source} -> {target}...", file=sys.stderr)
            if isinstance(texts, dict):
                results[target] = orchestrator.translate_values(
                    texts, source, target, content_kind
                )
            else:
                results[target] = orchestrator.translate_all(
                    texts, source, target, content_kind
                )
            translated_texts += progress.count
    except ProviderError as exc:
        message = str(exc)
        if verbose and exc.raw_response:
            message += f"\nRaw provider response:\n{exc.raw_response}"
        return 1, None, message
    except LocaleflowError as exc:
        return 1, None, str(exc)
    except KeyboardInterrupt:
        return 2, None, "Translation interrupted by user."

    rendered = json.dumps(results, ensure_ascii=False, indent=2)
    if output_path is not None:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(rendered + "\n", encoding="utf-8")
    else:
        print(rendered)

    summary = TranslationSummary(
        input_path=input_path,
        output_path=output_path,
        source_locale=source,
        target_locales=targets,
        total_texts=len(texts),
        translated_texts=translated_texts,
        provider_name=getattr(provider, "name", provider_name or "bedrock"),
        model=options.model_id,
        elapsed_seconds=time.time() - start_time,
        results=results,
    )
    return 0, summary, None


def _progress_printer(verbose: bool):
    if not verbose:
        return None

    def report(counter: ProgressCounter) -> None:
        print(f"  {counter.count}/{counter.total} strings translated", file=sys.stderr)

    return report


def print_summary(summary: TranslationSummary) -> None:
    """Output a friendly report once processing completes."""

    out = sys.stderr
    print("\nTranslation complete.", file=out)
    print(f"  Input file:      {summary.input_path}", file=out)
    if summary.output_path:
        print(f"  Output file:     {summary.output_path}", file=out)
    print(f"  Source locale:   {summary.source_locale}", file=out)
    print(f"  Target locales:  {', '.join(summary.target_locales)}", file=out)
    print(
        f"  Strings:         {summary.translated_texts} translated "
        f"({summary.total_texts} per locale)",
        file=out,
    )
    print(
        f"  Provider:        {summary.provider_name}"
        + (f" ({summary.model})" if summary.model else ""),
        file=out,
    )
    print(f"  Elapsed time:    {summary.elapsed_seconds:.2f} seconds", file=out)


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    setup_logging(args.verbose)
    messages.set_locale(args.message_locale)

    try:
        settings = get_settings()
    except TranslationProviderConfigurationError as exc:
        print(exc, file=sys.stderr)
        return 1

    provider_debug = bool(args.debug_provider or settings.LOCALEFLOW_PROVIDER_DEBUG)
    provider_name = args.provider or settings.TRANSLATION_PROVIDER
    options = provider_options(settings, provider_name)
    if args.model:
        options.model_id = args.model

    resolver = LocaleResolver(
        settings.LOCALEFLOW_BASE_LOCALE,
        lambda: configured_locales(settings),
    )

    exit_code, summary, message = execute_translation(
        input_file=args.input_file,
        output_file=args.output,
        locales=args.locales,
        source_locale=args.source_locale,
        resolver=resolver,
        provider_name=provider_name,
        options=options,
        batch_size=args.batch_size or settings.TRANSLATION_BATCH_SIZE,
        content_kind=ContentKind.HTML if args.html else ContentKind.PLAIN,
        verbose=args.verbose,
        provider_debug=provider_debug,
    )

    if message:
        print(message, file=sys.stderr)
    if summary:
        print_summary(summary)
    return exit_code


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
