"""CLI interface for phi-redactor: redacts PHI from clinical notes.

Usage:
    # Redact a file to stdout, summary on stderr
    phi-redactor -i note.txt

    # stdin → file, extra dictionaries, skip person names, JSON stats
    cat note.txt | phi-redactor -o clean.txt -c names.json --skip person --stats-json

    # HIPAA Safe Harbor identifiers (insurance, license, VIN, device, IP) too
    python -m phi_redactor.cli --safe-harbor -i note.txt
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Mapping

from .config import RedactorConfig, load_from_file, parse_category
from .errors import ConfigurationError, InputError, RedactorError
from .redactor import Redactor
from .types import Category

logger = logging.getLogger(__name__)


def _category(value: str) -> Category:
    try:
        return parse_category(value)
    except ConfigurationError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


def _read_input(path: Path | None) -> str:
    try:
        if path is None or str(path) == "-":
            raw = sys.stdin.buffer.read()
        else:
            raw = path.read_bytes()
    except OSError as e:
        raise InputError(f"failed to read input: {e}") from e
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InputError(f"input is not valid UTF-8 (byte offset {e.start})") from e


def _write_output(path: Path | None, contents: str) -> None:
    if path is None or str(path) == "-":
        sys.stdout.write(contents)
        sys.stdout.flush()
        return
    path.write_text(contents, encoding="utf-8")


def format_stats(counts: Mapping[Category, int]) -> str:
    """Plain-text summary: total first, then one line per non-zero category."""
    lines = [f"Redactions applied: {sum(counts.values())}"]
    for category in Category:
        n = counts.get(category, 0)
        if n:
            lines.append(f"  {category.value.lower():<10}: {n}")
    return "\n".join(lines)


def stats_to_json(counts: Mapping[Category, int]) -> str:
    """Pretty JSON with every category (zeros included) and the total."""
    payload = {c.value.lower(): counts.get(c, 0) for c in Category}
    payload["total"] = sum(counts.values())
    return json.dumps(payload, indent=2)


def _build_config(args: argparse.Namespace) -> RedactorConfig:
    config = load_from_file(args.config) if args.config else RedactorConfig()
    return config.with_overrides(skip=args.skip, safe_harbor=args.safe_harbor)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phi-redactor",
        description="Redacts common PHI elements from clinical notes.",
    )
    parser.add_argument("-i", "--input", type=Path, help="Input file ('-' or omitted: stdin)")
    parser.add_argument("-o", "--output", type=Path, help="Output file ('-' or omitted: stdout)")
    parser.add_argument("-c", "--config", type=Path,
                        help="JSON (or .yaml/.yml) config that augments the default dictionaries")
    parser.add_argument("--skip", type=_category, action="append", default=[], metavar="CATEGORY",
                        help="Category to leave unredacted (repeatable, e.g. --skip person)")
    parser.add_argument("--safe-harbor", action="store_true",
                        help="Also redact HIPAA Safe Harbor IDs (insurance, license, VIN, device, IP)")
    parser.add_argument("--quiet", action="store_true", help="Suppress the redaction summary")
    parser.add_argument("--stats-json", action="store_true", help="Emit redaction stats as JSON to stderr")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        redactor = Redactor(_build_config(args))
        text = _read_input(args.input)
        result = redactor.redact(text)
        _write_output(args.output, result.redacted_text)
    except RedactorError as e:
        logger.debug("Redaction failed", exc_info=True)
        sys.stderr.write(f"phi-redactor: {e}\n")
        return 1
    except OSError as e:
        sys.stderr.write(f"phi-redactor: failed to write output: {e}\n")
        return 1

    if not args.quiet:
        report = stats_to_json(result.counts) if args.stats_json else format_stats(result.counts)
        sys.stderr.write(report + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
