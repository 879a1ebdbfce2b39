"""
Deck verifier: text overflow, out-of-bounds shapes and text overlap.

Works on rendered canvases (before anything is written) and on ``.pptx``
files read back with python-pptx. Both are reduced to the same flat shape
view so one set of checks serves both.

Usage from the command line: ``briefdeck verify path/to/file.pptx`` or a
directory of decks.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from pptx import Presentation

from briefdeck.canvas import Canvas, Deck, TextBox
from briefdeck.config import SLIDE_HEIGHT, SLIDE_WIDTH
from briefdeck.metrics import FRAME_PADDING, count_lines

logger = logging.getLogger(__name__)

EMU_PER_INCH = 914400
EMU_PER_PT = 12700
DEFAULT_FONT_SIZE = 14.0
LINE_HEIGHT_FACTOR = 1.2

# Overflow is reported only past both thresholds; PowerPoint absorbs less.
OVERFLOW_RATIO = 0.15
OVERFLOW_MIN_INCHES = 0.05
BOUNDS_TOLERANCE = 0.01
OVERLAP_MIN_INCHES = 0.10


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ShapeView:
    """The parts of a shape the checks need, in inches and points."""

    index: int
    left: float
    top: float
    width: float
    height: float
    text: str = ""
    font_size_pt: float = DEFAULT_FONT_SIZE
    bold: bool = False

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def preview(self) -> str:
        txt = self.text.replace("\n", "|")[:30]
        return txt if txt.strip() else "(no text)"


@dataclass
class TextOverflow:
    slide_num: int
    shape_index: int
    text_preview: str
    font_size_pt: float
    is_bold: bool
    shape_width: float
    shape_height: float
    needed_height: float
    overflow_inches: float

    @property
    def severity(self) -> str:
        return severity_for(self.overflow_inches)


@dataclass
class OutOfBounds:
    slide_num: int
    shape_index: int
    text_preview: str
    left: float
    top: float
    right: float
    bottom: float


@dataclass
class ShapeOverlap:
    slide_num: int
    shape_a_index: int
    shape_b_index: int
    shape_a_text: str
    shape_b_text: str
    overlap_width: float
    overlap_height: float

    @property
    def severity(self) -> str:
        return severity_for(min(self.overlap_width, self.overlap_height))


@dataclass
class SlideReport:
    slide_num: int
    total_shapes: int
    text_shapes: int
    overflows: list[TextOverflow] = field(default_factory=list)
    out_of_bounds: list[OutOfBounds] = field(default_factory=list)
    overlaps: list[ShapeOverlap] = field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.overflows or self.out_of_bounds or self.overlaps)


@dataclass
class DeckReport:
    name: str
    total_slides: int
    slides: list[SlideReport] = field(default_factory=list)

    @property
    def total_overflows(self) -> int:
        return sum(len(s.overflows) for s in self.slides)

    @property
    def total_out_of_bounds(self) -> int:
        return sum(len(s.out_of_bounds) for s in self.slides)

    @property
    def total_overlaps(self) -> int:
        return sum(len(s.overlaps) for s in self.slides)

    @property
    def slides_with_issues(self) -> int:
        return sum(1 for s in self.slides if s.has_issues)

    @property
    def is_clean(self) -> bool:
        return self.slides_with_issues == 0


def severity_for(inches: float) -> str:
    if inches > 0.5:
        return "SEVERE"
    if inches > 0.2:
        return "MODERATE"
    return "MINOR"


# ---------------------------------------------------------------------------
# Shape views
# ---------------------------------------------------------------------------


def canvas_shapes(canvas: Canvas) -> list[ShapeView]:
    views = []
    for idx, element in enumerate(canvas.elements):
        view = ShapeView(idx, element.left, element.top, element.width, element.height)
        if isinstance(element, TextBox):
            view.text = element.text
            view.font_size_pt = element.font_size
            view.bold = element.bold
        views.append(view)
    return views


def _first_run_font(shape) -> tuple[float, bool]:
    for para in shape.text_frame.paragraphs:
        for run in para.runs:
            size = run.font.size / EMU_PER_PT if run.font.size is not None else DEFAULT_FONT_SIZE
            return size, bool(run.font.bold)
    return DEFAULT_FONT_SIZE, False


def pptx_shapes(slide) -> list[ShapeView]:
    views = []
    for idx, shape in enumerate(slide.shapes):
        view = ShapeView(
            idx,
            (shape.left or 0) / EMU_PER_INCH,
            (shape.top or 0) / EMU_PER_INCH,
            (shape.width or 0) / EMU_PER_INCH,
            (shape.height or 0) / EMU_PER_INCH,
        )
        if shape.has_text_frame:
            view.text = shape.text_frame.text
            view.font_size_pt, view.bold = _first_run_font(shape)
        views.append(view)
    return views


# ---------------------------------------------------------------------------
# Checks
# ---------------------------------------------------------------------------


def check_overflow(shape: ShapeView, slide_num: int) -> Optional[TextOverflow]:
    """Report *shape* if its text needs noticeably more height than it has."""
    if not shape.text.strip() or shape.width <= 0 or shape.height <= 0:
        return None
    line_height = shape.font_size_pt / 72.0 * LINE_HEIGHT_FACTOR
    needed = count_lines(shape.text, shape.font_size_pt, shape.width, shape.bold) * line_height
    available = shape.height - FRAME_PADDING
    overflow = needed - available
    if overflow > available * OVERFLOW_RATIO and overflow > OVERFLOW_MIN_INCHES:
        return TextOverflow(
            slide_num=slide_num,
            shape_index=shape.index,
            text_preview=shape.text.replace("\n", "|")[:60],
            font_size_pt=shape.font_size_pt,
            is_bold=shape.bold,
            shape_width=shape.width,
            shape_height=shape.height,
            needed_height=needed,
            overflow_inches=overflow,
        )
    return None


def check_bounds(shape: ShapeView, slide_num: int) -> Optional[OutOfBounds]:
    if (
        shape.left < -BOUNDS_TOLERANCE
        or shape.top < -BOUNDS_TOLERANCE
        or shape.right > SLIDE_WIDTH + BOUNDS_TOLERANCE
        or shape.bottom > SLIDE_HEIGHT + BOUNDS_TOLERANCE
    ):
        return OutOfBounds(slide_num, shape.index, shape.preview, shape.left, shape.top, shape.right, shape.bottom)
    return None


def detect_overlaps(shapes: list[ShapeView], slide_num: int) -> list[ShapeOverlap]:
    """Overlaps between shapes that both carry text.

    Backgrounds under text are intentional and ignored, as are overlaps
    thinner than 0.1" in either direction.
    """
    texts = [s for s in shapes if s.text.strip()]
    overlaps = []
    for pos, a in enumerate(texts):
        for b in texts[pos + 1:]:
            overlap_w = min(a.right, b.right) - max(a.left, b.left)
            overlap_h = min(a.bottom, b.bottom) - max(a.top, b.top)
            if overlap_w <= 0 or overlap_h <= 0:
                continue
            if min(overlap_w, overlap_h) < OVERLAP_MIN_INCHES:
                continue
            overlaps.append(ShapeOverlap(slide_num, a.index, b.index, a.preview, b.preview, overlap_w, overlap_h))
    return overlaps


def verify_shapes(shapes: list[ShapeView], slide_num: int) -> SlideReport:
    report = SlideReport(
        slide_num=slide_num,
        total_shapes=len(shapes),
        text_shapes=sum(1 for s in shapes if s.text.strip()),
    )
    for shape in shapes:
        overflow = check_overflow(shape, slide_num)
        if overflow:
            report.overflows.append(overflow)
        outside = check_bounds(shape, slide_num)
        if outside:
            report.out_of_bounds.append(outside)
    report.overlaps = detect_overlaps(shapes, slide_num)
    return report


def _verify(name: str, slides: Iterable[list[ShapeView]]) -> DeckReport:
    slide_reports = [verify_shapes(shapes, num) for num, shapes in enumerate(slides, start=1)]
    report = DeckReport(name=name, total_slides=len(slide_reports), slides=slide_reports)
    logger.info("Verified %s: %d of %d slides with issues", name, report.slides_with_issues, report.total_slides)
    return report


def verify_deck(deck: Deck, name: str = "deck") -> DeckReport:
    """Verify rendered canvases before they are written."""
    return _verify(name, (canvas_shapes(c) for c in deck))


def verify_pptx(path: Union[str, Path]) -> DeckReport:
    """Verify every slide of a written presentation."""
    prs = Presentation(str(path))
    return _verify(Path(path).stem, (pptx_shapes(s) for s in prs.slides))


# ---------------------------------------------------------------------------
# Report formatting
# ---------------------------------------------------------------------------


def format_report(report: DeckReport, verbose: bool = False) -> str:
    """Format a deck report as human-readable text."""
    lines = [f"\n{'=' * 70}", report.name, "=" * 70]

    if report.is_clean:
        lines.append("  ALL CLEAN - no overflow, out-of-bounds shape or overlap detected")
        return "\n".join(lines)

    parts = []
    if report.total_overflows:
        parts.append(f"{report.total_overflows} overflows")
    if report.total_out_of_bounds:
        parts.append(f"{report.total_out_of_bounds} out of bounds")
    if report.total_overlaps:
        parts.append(f"{report.total_overlaps} overlaps")
    lines.append(f"  {', '.join(parts)} across {report.slides_with_issues}/{report.total_slides} slides")

    for sr in report.slides:
        if not sr.has_issues:
            if verbose:
                lines.append(f"\n  Slide {sr.slide_num}: CLEAN")
            continue
        lines.append(f"\n  Slide {sr.slide_num}:")

        for ov in sr.overflows:
            lines.append(
                f"    [{ov.severity}] {ov.font_size_pt:.0f}pt{'(B)' if ov.is_bold else ''}"
                f' in {ov.shape_width:.1f}"x{ov.shape_height:.2f}"'
                f' needs {ov.needed_height:.2f}" (overflow: {ov.overflow_inches:.2f}")'
            )
            lines.append(f'      "{ov.text_preview}"')

        for ob in sr.out_of_bounds:
            lines.append(
                f"    [OUT-OF-BOUNDS] shape {ob.shape_index}"
                f' spans ({ob.left:.2f}, {ob.top:.2f})-({ob.right:.2f}, {ob.bottom:.2f})'
            )
            lines.append(f'      "{ob.text_preview}"')

        for ol in sr.overlaps:
            lines.append(
                f"    [OVERLAP-{ol.severity}] shapes {ol.shape_a_index} & {ol.shape_b_index}:"
                f' {ol.overlap_width:.2f}"x{ol.overlap_height:.2f}" overlap'
            )
            lines.append(f'      A: "{ol.shape_a_text}"  B: "{ol.shape_b_text}"')

    return "\n".join(lines)
