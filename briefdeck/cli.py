"""
briefdeck command line.

Usage:
    briefdeck classify briefing.docx
    briefdeck normalize oracle.json [--html slides.html]
    briefdeck render oracle.json [-o deck.pptx] [--html slides.html]
                     [--classifications classes.json] [--assets DIR]
    briefdeck verify deck.pptx | decks/ [--verbose]

Exit status is 0 on success, 2 for bad input and 1 for any other failure.
"""

import argparse
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from briefdeck.classifier import build_classification_guidance, classify_document
from briefdeck.config import Settings
from briefdeck.docx_source import read_document_text
from briefdeck.enforcer import enforce
from briefdeck.errors import BriefdeckError, InputError
from briefdeck.layout import SlideLayoutEngine
from briefdeck.logging_config import configure_logging
from briefdeck.models import Classification
from briefdeck.normalizer import normalize
from briefdeck.pptx_writer import write_deck
from briefdeck.verify import format_report, verify_pptx

logger = logging.getLogger(__name__)


def _read_text(path: Optional[str]) -> str:
    if not path:
        return ""
    p = Path(path)
    if not p.is_file():
        raise InputError(f"Input file not found: {p}")
    return p.read_text(encoding="utf-8")


def _load_classifications(path: Optional[str]) -> list[Classification]:
    if not path:
        return []
    try:
        data = json.loads(_read_text(path))
        return [Classification.from_dict(item) for item in data]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise InputError(f"Invalid classifications file {path}: {exc}") from exc


# ── Subcommands ───────────────────────────────────────────────────────────────


def cmd_classify(args, settings: Settings) -> int:
    classifications = classify_document(read_document_text(args.document), settings.classifier)
    print(json.dumps([c.to_dict() for c in classifications], indent=2))
    print()
    print(build_classification_guidance(classifications))
    return 0


def cmd_normalize(args, settings: Settings) -> int:
    slides = normalize(_read_text(args.input), _read_text(args.html))
    print(json.dumps([s.to_dict() for s in slides], indent=2, ensure_ascii=False))
    return 0


def cmd_render(args, settings: Settings) -> int:
    if args.assets:
        settings = replace(settings, assets=replace(settings.assets, directory=Path(args.assets)))

    slides = normalize(_read_text(args.input), _read_text(args.html))
    classifications = _load_classifications(args.classifications)
    if classifications:
        slides = enforce(slides, classifications)

    deck = SlideLayoutEngine(settings.theme, settings.assets, settings.layout).render(slides)
    output_path = Path(args.output) if args.output else Path(args.input).with_suffix(".pptx")
    write_deck(deck, output_path, settings.assets, settings.theme)

    print(f"Done! Created {output_path} ({len(deck)} slides)")
    if deck.warnings:
        print(f"\nWarnings ({len(deck.warnings)}):", file=sys.stderr)
        for warning in deck.warnings:
            print(f"  - {warning}", file=sys.stderr)
    return 0


def cmd_verify(args, settings: Settings) -> int:
    path = Path(args.path)
    pptx_files = sorted(path.glob("*.pptx")) if path.is_dir() else [path]
    pptx_files = [p for p in pptx_files if p.is_file()]
    if not pptx_files:
        raise InputError(f"No .pptx files found at {path}")

    total_slides = total_clean = 0
    for pptx_file in pptx_files:
        report = verify_pptx(pptx_file)
        print(format_report(report, args.verbose_report))
        total_slides += report.total_slides
        total_clean += report.total_slides - report.slides_with_issues

    print(f"\n{'=' * 70}")
    print(f"SUMMARY: clean slides {total_clean}/{total_slides} across {len(pptx_files)} deck(s)")
    print("=" * 70)
    return 0 if total_clean == total_slides else 1


# ── Entry point ───────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="briefdeck", description="Turn compliance briefing documents into branded slide decks."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("classify", help="Classify the articles of a .docx or .txt briefing")
    p.add_argument("document")
    p.set_defaults(func=cmd_classify)

    p = sub.add_parser("normalize", help="Print normalized slides from oracle JSON output")
    p.add_argument("input", help="Oracle output (JSON, optionally fenced)")
    p.add_argument("--html", help="Slide HTML the oracle structured (notes and fallback source)")
    p.set_defaults(func=cmd_normalize)

    p = sub.add_parser("render", help="Normalize, enforce and write a .pptx deck")
    p.add_argument("input", help="Oracle output (JSON, optionally fenced)")
    p.add_argument("-o", "--output", help="Output PPTX path (default: input name with .pptx)")
    p.add_argument("--html", help="Slide HTML the oracle structured")
    p.add_argument("--classifications", help="JSON list of {title, importance}")
    p.add_argument("--assets", help="Directory holding background and logo images")
    p.set_defaults(func=cmd_render)

    p = sub.add_parser("verify", help="Check a .pptx (or a directory of them) for overflow and overlap")
    p.add_argument("path")
    p.add_argument("--verbose", dest="verbose_report", action="store_true", help="List clean slides too")
    p.set_defaults(func=cmd_verify)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = Settings.from_env()
    configure_logging("DEBUG" if args.verbose else settings.log_level)

    try:
        return args.func(args, settings)
    except InputError as exc:
        logger.error("%s", exc)
        return 2
    except BriefdeckError as exc:
        logger.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
