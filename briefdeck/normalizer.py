"""
Slide data normalizer.

Turns the structuring oracle's raw JSON reply into typed ``Slide`` objects:
strips code fences, cleans every string field, coerces enum-like fields and
re-attaches speaker notes recovered from the slide HTML. When the reply is
unusable the HTML fallback extractor takes over.
"""

import json
import logging
from typing import Iterator

from bs4 import BeautifulSoup

from briefdeck.errors import NoSlidesError, SlideDataError
from briefdeck.html_fallback import extract_slides_from_html
from briefdeck.models import (
    NOTES_TYPES,
    SLIDE_CLASSES,
    AgendaSlide,
    ChecklistItem,
    ChecklistSlide,
    ContentSlide,
    GoDeeperSlide,
    QotmSlide,
    Slide,
    SlideType,
    TableSlide,
    TextBoxSpec,
    TextboxSlide,
    TitleSlide,
    UnsupportedSlide,
)
from briefdeck.text import (
    clean_notes,
    clean_text,
    has_notes_markup,
    notes_html_to_text,
    strip_code_fences,
)

logger = logging.getLogger(__name__)

_TRUTHY = {"true", "yes", "1", "checked", "x"}


# ── Field coercion ────────────────────────────────────────────────────────────


def coerce_checked(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    if isinstance(value, (int, float)):
        return value != 0
    return False


def coerce_box_color(value) -> str:
    if value == "teal":
        return "teal"
    if value not in (None, "", "gray"):
        logger.warning("Textbox color %r coerced to gray", value)
    return "gray"


def _text(value, default: str = "") -> str:
    if value is None:
        return default
    if isinstance(value, list):
        value = " ".join(str(v) for v in value if v is not None)
    return clean_text(value) or default


def _lines(value, keep_indent: bool = False) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return [clean_text(value)]
    cleaned = [clean_text(v, keep_indent=keep_indent) for v in value if v is not None]
    return [line for line in cleaned if line.strip()]


def _notes(value) -> str:
    if not value:
        return ""
    value = str(value)
    return notes_html_to_text(value) if has_notes_markup(value) else clean_notes(value)


def _table(data: dict) -> tuple[list[str], list[list[str]]]:
    headers = [clean_text(h) for h in (data.get("headers") or []) if h is not None]
    rows = []
    for raw in data.get("rows") or []:
        cells = raw if isinstance(raw, list) else [raw]
        row = [clean_text(c) for c in cells]
        if headers:
            if len(row) != len(headers):
                logger.debug("Table row of %d cells fitted to %d headers", len(row), len(headers))
            row = (row + [""] * len(headers))[: len(headers)]
        rows.append(row)
    return headers, rows


def _checklist_items(value) -> list[ChecklistItem]:
    items = []
    for raw in value or []:
        if isinstance(raw, dict):
            items.append(
                ChecklistItem(text=_text(raw.get("text")), checked=coerce_checked(raw.get("checked")))
            )
        elif raw is not None:
            items.append(ChecklistItem(text=_text(raw)))
    return items


def _boxes(value) -> list[TextBoxSpec]:
    boxes = []
    for raw in value or []:
        if not isinstance(raw, dict):
            continue
        boxes.append(
            TextBoxSpec(
                header=_text(raw.get("header")),
                content=_text(raw.get("content")),
                color=coerce_box_color(raw.get("color")),
            )
        )
    return boxes


def slide_from_dict(data: dict) -> Slide:
    """Build a typed slide from one oracle JSON entry.

    Missing fields take their documented defaults; an unknown ``type`` yields
    an ``UnsupportedSlide`` for the layout engine to skip.
    """
    raw_type = str(data.get("type", "")).strip()
    title = _text(data.get("title"))
    notes = _notes(data.get("notes"))

    try:
        kind = SlideType(raw_type.replace("-", "_"))
    except ValueError:
        logger.warning("Unknown slide type %r", raw_type)
        return UnsupportedSlide(title=title, notes=notes, raw_type=raw_type, data=dict(data))

    if kind is SlideType.TITLE:
        return TitleSlide(
            title=title,
            briefing_header=_text(data.get("briefing_header")),
            subtitle=_text(data.get("subtitle")),
        )
    if kind is SlideType.AGENDA:
        return AgendaSlide(title=title or "Agenda", items=_lines(data.get("items"), keep_indent=True))
    if kind is SlideType.CONTENT:
        bullets = data.get("bullets", True)
        return ContentSlide(
            title=title,
            notes=notes,
            content=_lines(data.get("content"), keep_indent=True),
            bullets=True if bullets is None else coerce_checked(bullets),
        )
    if kind is SlideType.GO_DEEPER:
        return GoDeeperSlide(title=title, notes=notes, content=_lines(data.get("content"), keep_indent=True))
    if kind is SlideType.TABLE:
        headers, rows = _table(data)
        return TableSlide(title=title, notes=notes, headers=headers, rows=rows)
    if kind is SlideType.CHECKLIST:
        return ChecklistSlide(
            title=title,
            notes=notes,
            content=_lines(data.get("content")),
            checklist_heading=_text(data.get("checklist_heading")),
            checklist_panel_text=_text(data.get("checklist_panel_text")),
            checklist_items=_checklist_items(data.get("checklist_items")),
        )
    if kind is SlideType.TEXTBOX:
        return TextboxSlide(title=title, notes=notes, boxes=_boxes(data.get("boxes")))
    if kind is SlideType.QOTM:
        return QotmSlide(
            title=title,
            notes=notes,
            scenario=_lines(data.get("scenario")),
            rule=_lines(data.get("rule")),
            action=_lines(data.get("action")),
        )
    # Transitions and the thank-you slide carry a title only
    return SLIDE_CLASSES[kind](title=title)


# ── Speaker notes pre-pass ────────────────────────────────────────────────────


def extract_notes_blocks(source_html: str) -> list[str]:
    """Presenter text of every ``div.slide-notes`` block, in document order."""
    if not source_html or "slide-notes" not in source_html:
        return []
    soup = BeautifulSoup(source_html, "lxml")
    blocks = [
        notes_html_to_text(div.decode_contents())
        for div in soup.find_all("div", class_="slide-notes")
    ]
    logger.info("Found %d slide-notes blocks in source HTML", len(blocks))
    return blocks


def inject_notes(slides: list[Slide], notes_blocks: list[str]) -> list[Slide]:
    """Attach notes blocks to note-bearing slides in order.

    A recovered block replaces whatever notes the oracle supplied; slides
    past the last block keep their own notes.
    """
    blocks: Iterator[str] = iter(notes_blocks)
    for index, slide in enumerate(slides):
        if slide.kind not in NOTES_TYPES:
            continue
        block = next(blocks, None)
        if block is None:
            break
        if block:
            slide.notes = block
            logger.debug("Injected notes into slide %d (%s)", index, slide.type)
    return slides


# ── Entry point ───────────────────────────────────────────────────────────────


def parse_slide_json(oracle_output: str) -> list[Slide]:
    """Parse the oracle's JSON reply. Raises ``SlideDataError`` when unusable."""
    cleaned = strip_code_fences(oracle_output or "")
    if not cleaned:
        raise SlideDataError("empty oracle response")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise SlideDataError(f"malformed JSON: {exc}") from exc

    entries = payload.get("slides") if isinstance(payload, dict) else payload
    if not isinstance(entries, list):
        raise SlideDataError("response has no 'slides' array")
    if not entries:
        raise SlideDataError("response has an empty 'slides' array")

    slides = []
    for position, entry in enumerate(entries):
        if not isinstance(entry, dict) or not entry.get("type"):
            raise SlideDataError(f"slide {position} has no 'type'")
        slides.append(slide_from_dict(entry))
    return slides


def normalize(oracle_output: str, source_html: str = "") -> list[Slide]:
    """Normalize oracle output into slides, falling back to HTML extraction.

    *source_html* is the slide markup the oracle was asked to structure; it
    supplies speaker notes and is what the fallback extractor reads.
    Raises ``NoSlidesError`` if neither path yields a slide.
    """
    try:
        slides = parse_slide_json(oracle_output)
    except SlideDataError as exc:
        logger.warning("Structured extraction failed (%s), falling back to HTML parsing", exc)
        slides = extract_slides_from_html(source_html or oracle_output or "")
        if not slides:
            raise NoSlidesError("No slides found in HTML content") from exc

    notes_blocks = extract_notes_blocks(source_html)
    if notes_blocks:
        inject_notes(slides, notes_blocks)

    logger.info("Normalized %d slides", len(slides))
    return slides
