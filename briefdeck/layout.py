"""
Slide layout engine.

Turns normalized slides into fixed-size canvases, one renderer per slide
type. Renderers size fonts to their boxes, drop list items that would run
past the safe zone, and paginate long tables. Rendering is sequential and
pure: no I/O happens here, and per-slide anomalies are recorded on the
``Deck`` instead of aborting the run.
"""

import logging
import math
import re
from datetime import date
from typing import Callable, Optional

from briefdeck.canvas import Canvas, Deck
from briefdeck.config import (
    DISCLAIMER,
    SLIDE_HEIGHT,
    SLIDE_WIDTH,
    AssetPaths,
    LayoutConfig,
    Theme,
)
from briefdeck.metrics import (
    cap_chars,
    estimate_bullet_height,
    estimate_text_height,
    fit_font_size,
    fits,
    truncate_to_fit,
)
from briefdeck.models import (
    AgendaSlide,
    ChecklistSlide,
    ContentSlide,
    GoDeeperSlide,
    QotmSlide,
    Slide,
    SlideType,
    TableSlide,
    TextboxSlide,
    TitleSlide,
    TransitionSlide,
)
from briefdeck.validators import get_header_font_size, validate_color

logger = logging.getLogger(__name__)

# ── Shared geometry ───────────────────────────────────────────────────────────
HEADER_BAR_HEIGHT = 1.1
HEADER_TITLE_BOX = (0.5, 0.15, 7.0, 0.8)
HEADER_LOGO_BOX = (8.5, 0.2, 1.2, 0.6)
PAGE_NUMBER_BOX = (9.0, 5.1, 0.8, 0.4)
CORNER_LOGO_BOX = (7.5, 4.125, 2.0, 1.0)  # 2:1 logo, half its height as padding
MIN_TITLE_FONT = 14
GLYPH_WIDTH = 0.2

SECTION_HEADING_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^Background and Timeline",
        r"^What is changing and why",
        r"^What changed",
        r"^What's next",
        r"^Key Points",
        r"^Overview",
        r"^Court Decision",
        r"^Employer Impact",
        r"^What happened",
        r"^Timeline",
        r"^The Decision",
    )
]

TEXTBOX_DEFAULT_HEADER = "Header Text"
TEXTBOX_DEFAULT_CONTENT = "Content text goes here..."

# Agenda sizing tiers: (item count above which the tier applies, item pt, sub-item pt, check pt, line height)
AGENDA_TIERS = ((12, 12, 11, 14, 0.38), (10, 13, 12, 16, 0.42))
AGENDA_DEFAULT_TIER = (15, 13, 18, 0.5)

# Q&A-of-the-month tiers: (bullet count above which the tier applies, pt, bullet height, spacing, banner pt)
QOTM_TIERS = ((7, 11, 0.35, 0.38, 12), (5, 12, 0.38, 0.42, 13))
QOTM_DEFAULT_TIER = (13, 0.4, 0.45, 14)

# Table font bands: (longest cell above which the band applies, data pt, header pt)
TABLE_FONT_BANDS = ((80, 7, 9), (50, 8, 10), (30, 9, 11))
TABLE_DEFAULT_FONTS = (10, 12)


def is_section_heading(line: str) -> bool:
    stripped = line.strip()
    if stripped.startswith(("•", "-", "◦")):
        return False
    return any(p.match(stripped) for p in SECTION_HEADING_PATTERNS)


def glyph_height(size: float, floor: float) -> float:
    """Box height that shows one bullet glyph at *size* without clipping."""
    return max(floor, estimate_text_height("•", size, GLYPH_WIDTH))


def split_bullet(line: str) -> tuple[str, bool]:
    """Strip the bullet marker from *line*; report whether it is a sub-bullet."""
    stripped = line.strip()
    is_sub = stripped.startswith(("-", "◦"))
    if stripped.startswith(("•", "-", "◦")):
        stripped = stripped[1:].strip()
    return stripped, is_sub


def default_briefing_header(theme: Theme, today: date) -> str:
    return f"{theme.brand_name} Monthly Briefing: {today:%B} {today.day}, {today.year}"


class SlideLayoutEngine:
    """Renders slides onto 10 x 5.625 canvases."""

    def __init__(
        self,
        theme: Optional[Theme] = None,
        assets: Optional[AssetPaths] = None,
        layout: Optional[LayoutConfig] = None,
        today: Optional[date] = None,
    ):
        self.theme = theme or Theme()
        self.assets = assets or AssetPaths()
        self.layout = layout or LayoutConfig()
        self.today = today

        self._renderers: dict[SlideType, Callable[[Slide, int, Deck], list[Canvas]]] = {
            SlideType.TITLE: self.render_title,
            SlideType.AGENDA: self.render_agenda,
            SlideType.CONTENT: self.render_content,
            SlideType.GO_DEEPER: self.render_go_deeper,
            SlideType.TABLE: self.render_table,
            SlideType.CHECKLIST: self.render_checklist,
            SlideType.TEXTBOX: self.render_textbox,
            SlideType.TRANSITION: self.render_transition,
            SlideType.TRANSITION_ALT: self.render_transition,
            SlideType.QOTM: self.render_qotm,
            SlideType.THANKYOU: self.render_thankyou,
        }
        missing = set(SlideType) - set(self._renderers)
        if missing:
            raise TypeError(f"No renderer for slide types: {sorted(m.value for m in missing)}")

    # ── Entry point ──────────────────────────────────────────────────────────

    def render(self, slides: list[Slide]) -> Deck:
        """Render *slides* in order. Unknown types are skipped, never fatal."""
        deck = Deck()
        for index, slide in enumerate(slides):
            renderer = self._renderers.get(slide.kind)
            if renderer is None:
                deck.warn(f"Slide {index + 1}: unknown slide type {slide.type!r}, skipped")
                continue
            try:
                canvases = renderer(slide, index, deck)
            except Exception:
                logger.exception("Failed to render slide %d (%s)", index + 1, slide.type)
                deck.warnings.append(f"Slide {index + 1}: {slide.type} slide could not be rendered")
                continue
            deck.canvases.extend(canvases)
            logger.info("Rendered %s slide %d into %d canvas(es)", slide.type, index + 1, len(canvases))
        return deck

    # ── Shared pieces ────────────────────────────────────────────────────────

    def _color(self, value: str, default: Optional[str] = None) -> str:
        return validate_color(value, default or self.theme.text)

    def _new_canvas(self, slide: Slide, index: int, background: Optional[str] = None) -> Canvas:
        canvas = Canvas(slide_type=slide.type, source_index=index, page_label=str(index + 1))
        if background:
            canvas.background = self._color(background)
        return canvas

    def _text(self, canvas: Canvas, text: str, box, size: float, color: str, **style):
        left, top, width, height = box
        return canvas.add_text(
            text,
            left,
            top,
            width,
            height,
            font_size=size,
            color=self._color(color),
            font=self.theme.font,
            **style,
        )

    def _fitted_text(
        self,
        canvas: Canvas,
        text: str,
        box,
        sizes,
        color: str,
        bold: bool = False,
        **style,
    ):
        """Place *text* at the largest size in *sizes* that fits; cut it if none does."""
        _, _, width, height = box
        size = fit_font_size(text, width, height, sizes, bold=bold)
        text = truncate_to_fit(text, size, width, height, bold=bold)
        return self._text(canvas, text, box, size, color, bold=bold, **style)

    def _full_bleed(self, canvas: Canvas, image: str, overlay_transparency: int):
        canvas.add_picture(image, 0, 0, SLIDE_WIDTH, SLIDE_HEIGHT, role="background")
        canvas.add_rect(
            0,
            0,
            SLIDE_WIDTH,
            SLIDE_HEIGHT,
            fill=self._color(self.theme.brand),
            transparency=overlay_transparency,
            role="overlay",
        )

    def _header(self, canvas: Canvas, title: str, bar: bool = True):
        if bar:
            canvas.add_rect(
                0, 0, SLIDE_WIDTH, HEADER_BAR_HEIGHT, fill=self._color(self.theme.brand), role="header_bar"
            )
        start = get_header_font_size(title)
        self._fitted_text(
            canvas,
            title,
            HEADER_TITLE_BOX,
            range(start, MIN_TITLE_FONT - 1, -1),
            self.theme.white,
            valign="middle",
            role="title",
        )
        canvas.add_picture(self.assets.logo, *HEADER_LOGO_BOX, role="logo")

    def _page_number(self, canvas: Canvas, color: Optional[str] = None, box=PAGE_NUMBER_BOX, size: int = 18):
        self._text(
            canvas,
            canvas.page_label,
            box,
            size,
            color or self.theme.brand,
            align="center",
            valign="middle",
            role="page_number",
        )

    def _bullet_list(
        self,
        canvas: Canvas,
        lines: list[str],
        start_y: float,
        font_size: int,
        deck: Deck,
        headings: bool = False,
        glyphs: bool = True,
        sub_glyph: str = "•",
        sub_glyph_size: Optional[int] = None,
    ) -> int:
        """Walk *lines* top to bottom, stopping before the first that would cross max Y.

        Returns how many lines were placed.
        """
        max_y = self.layout.max_y
        y = start_y
        placed = 0
        for line in lines:
            if headings and is_section_heading(line):
                height = 0.4
                if y + height > max_y:
                    break
                self._text(
                    canvas,
                    line.strip(),
                    (0.5, y, 9.0, height),
                    18,
                    self.theme.brand,
                    bold=True,
                    align="center",
                    valign="middle",
                    role="heading",
                )
                y += height + 0.15
                placed += 1
                continue

            text, is_sub = split_bullet(line)
            indent = 0.4 if is_sub else 0.0
            width = 8.5 - indent
            height = estimate_bullet_height(text, width, font_size)
            if y + height > max_y:
                break
            if glyphs:
                glyph = sub_glyph if is_sub else "•"
                glyph_size = sub_glyph_size if (is_sub and sub_glyph_size) else font_size
                glyph_box = (0.6 + indent, y, GLYPH_WIDTH, glyph_height(glyph_size, 0.3))
                self._text(canvas, glyph, glyph_box, glyph_size, self.theme.text, role="bullet")
            self._text(canvas, text, (0.9 + indent, y, width, height), font_size, self.theme.text, role="body")
            y += height + 0.05
            placed += 1

        dropped = len(lines) - placed
        if dropped:
            deck.warn(
                f"Slide {canvas.source_index + 1}: dropped {dropped} of {len(lines)} "
                f"item(s) that did not fit above y={max_y}"
            )
        return placed

    # ── Title ────────────────────────────────────────────────────────────────

    def render_title(self, slide: TitleSlide, index: int, deck: Deck) -> list[Canvas]:
        """Full-bleed background, brand overlay, briefing header, title and subtitle."""
        canvas = self._new_canvas(slide, index)
        canvas.page_label = ""
        self._full_bleed(canvas, self.assets.title_background, 20)

        header = slide.briefing_header or default_briefing_header(self.theme, self.today or date.today())
        self._fitted_text(
            canvas, header, (0.5, 2.0, 8.5, 0.8), range(32, 17, -2), self.theme.white, valign="middle", role="briefing_header"
        )
        if slide.title:
            self._fitted_text(
                canvas, slide.title, (0.5, 3.0, 8.5, 0.8), range(24, 13, -2), self.theme.white, valign="middle", role="title"
            )
        if slide.subtitle:
            self._fitted_text(
                canvas, slide.subtitle, (0.5, 3.8, 6.8, 0.5), range(16, 9, -1), self.theme.white, role="subtitle"
            )
        canvas.add_picture(self.assets.logo, *CORNER_LOGO_BOX, role="logo")
        return [canvas]

    # ── Agenda ───────────────────────────────────────────────────────────────

    def render_agenda(self, slide: AgendaSlide, index: int, deck: Deck) -> list[Canvas]:
        """Background on the left, white panel on the right listing checked agenda items."""
        canvas = self._new_canvas(slide, index)
        self._full_bleed(canvas, self.assets.agenda_background, 20)
        self._text(canvas, "Agenda", (0.4, 1.4, 3.5, 1.0), 42, self.theme.white, valign="middle", role="title")
        canvas.add_rect(4.0, 0, 6.0, SLIDE_HEIGHT, fill=self._color(self.theme.white), role="panel")

        total = len(slide.items)
        item_size, sub_size, check_size, line_height = AGENDA_DEFAULT_TIER
        for threshold, *tier in AGENDA_TIERS:
            if total > threshold:
                item_size, sub_size, check_size, line_height = tier
                break

        items = [item for item in slide.items[: self.layout.agenda_max_items] if item.strip()]
        if total > self.layout.agenda_max_items:
            deck.warn(f"Slide {index + 1}: agenda shows {self.layout.agenda_max_items} of {total} items")
        if items:
            usable = SLIDE_HEIGHT - 0.2
            if len(items) * line_height > usable:
                line_height = usable / len(items)

        y = (SLIDE_HEIGHT - len(items) * line_height) / 2
        for item in items:
            is_sub = item.startswith(("  ", "◦", "- "))
            indent = 0.3 if is_sub else 0.0
            self._text(
                canvas,
                "✓",
                (4.2 + indent, y, 0.3, min(0.4, line_height)),
                check_size - 2 if is_sub else check_size,
                self.theme.check_green,
                bold=True,
                align="center",
                role="check",
            )
            text = re.sub(r"^[◦\-\s]*", "", item.strip())
            size = sub_size if is_sub else item_size
            self._fitted_text(
                canvas,
                text,
                (4.6 + indent, y, 5.0 - indent, line_height - 0.05),
                range(size, 8, -1),
                self.theme.brand,
                role="agenda_item",
            )
            y += line_height

        canvas.add_picture(self.assets.logo, 0.3, SLIDE_HEIGHT - 1.5, 2.0, 1.0, role="logo")
        self._page_number(canvas, box=(9.2, 5.0, 0.6, 0.4), size=20)
        return [canvas]

    # ── Content / Go Deeper ──────────────────────────────────────────────────

    def render_content(self, slide: ContentSlide, index: int, deck: Deck) -> list[Canvas]:
        """Header bar and logo over bullets that stop at the safe zone."""
        canvas = self._new_canvas(slide, index, self.theme.page_background)
        canvas.notes = slide.notes
        self._header(canvas, slide.title)
        lines = slide.content or ["No content available"]
        self._bullet_list(canvas, lines, self.layout.content_start_y, 14, deck, headings=True, glyphs=slide.bullets)
        self._page_number(canvas)
        return [canvas]

    def render_go_deeper(self, slide: GoDeeperSlide, index: int, deck: Deck) -> list[Canvas]:
        """Content layout under a "Go Deeper" banner."""
        canvas = self._new_canvas(slide, index, self.theme.page_background)
        canvas.notes = slide.notes
        self._header(canvas, slide.title)
        canvas.add_rect(0.6, 1.3, 8.8, 0.5, fill=self._color(self.theme.gray), role="banner")
        self._text(
            canvas, "Go Deeper", (0.8, 1.35, 8.4, 0.4), 16, self.theme.brand, bold=True, valign="middle", role="banner_label"
        )
        lines = slide.content or ["No content available"]
        self._bullet_list(
            canvas, lines, self.layout.go_deeper_start_y, 13, deck, sub_glyph="◦", sub_glyph_size=11
        )
        self._page_number(canvas)
        return [canvas]

    # ── Table ────────────────────────────────────────────────────────────────

    def table_row_height(self, slide: TableSlide) -> float:
        cfg = self.layout
        if cfg.table_row_height:
            return cfg.table_row_height
        longest = max((len(c) for row in [slide.headers, *slide.rows] for c in row), default=0)
        height = max(cfg.table_min_row_height, min(cfg.table_max_row_height, cfg.table_available_height / (len(slide.rows) + 1)))
        if longest > 50:
            height = max(height, cfg.table_long_cell_row_height)
        return height

    def rows_per_page(self, row_height: float) -> int:
        # one row of the available height goes to the repeated header
        return max(1, math.floor(self.layout.table_available_height / row_height + 1e-9) - 1)

    def paginate_rows(self, slide: TableSlide) -> list[list[list[str]]]:
        """Split table rows into page-sized chunks, in order."""
        per_page = self.rows_per_page(self.table_row_height(slide))
        return [slide.rows[i:i + per_page] for i in range(0, len(slide.rows), per_page)]

    def column_widths(self, slide: TableSlide) -> list[float]:
        """Widths proportional to each column's longest cell, summing to the table width."""
        columns = len(slide.headers)
        longest = [0] * columns
        for row in [slide.headers, *slide.rows]:
            for col, cell in enumerate(row[:columns]):
                longest[col] = max(longest[col], len(cell))
        total = sum(longest)
        available = self.layout.table_available_width
        if total == 0:
            return [available / columns] * columns
        return [length / total * available for length in longest]

    def render_table(self, slide: TableSlide, index: int, deck: Deck) -> list[Canvas]:
        """Banded table, paginated with the header repeated on every page."""
        if not slide.headers or not slide.rows:
            deck.warn(f"Slide {index + 1}: table {slide.title!r} has no headers or rows, skipped")
            return []

        widths = self.column_widths(slide)
        row_height = self.table_row_height(slide)
        longest = max(len(c) for row in [slide.headers, *slide.rows] for c in row)
        data_size, header_size = TABLE_DEFAULT_FONTS
        for threshold, data_pt, header_pt in TABLE_FONT_BANDS:
            if longest > threshold:
                data_size, header_size = data_pt, header_pt
                break

        pages = self.paginate_rows(slide)
        total = len(pages)
        title = slide.title or "Table"
        logger.info("Table %r split into %d page(s) of up to %d rows", title, total, len(pages[0]))

        canvases = []
        for page_no, page_rows in enumerate(pages, start=1):
            canvas = self._new_canvas(slide, index, self.theme.page_background)
            if page_no > 1:
                canvas.page_label = f"{index + 1}-{page_no}"
            else:
                canvas.notes = slide.notes
            page_title = f"{title} ({page_no}/{total})" if total > 1 else title
            self._header(canvas, page_title)

            for row_no, row in enumerate([slide.headers, *page_rows]):
                y = 1.4 + row_no * row_height
                x = 0.4
                if row_no == 0:
                    fill, color = self.theme.brand, self.theme.white
                elif row_no % 2 == 1:
                    fill, color = self.theme.teal, self.theme.text
                else:
                    fill, color = self.theme.gray, self.theme.text
                for col, width in enumerate(widths):
                    cell = row[col] if col < len(row) else ""
                    canvas.add_rect(
                        x,
                        y,
                        width,
                        row_height,
                        fill=self._color(fill),
                        border=self._color(self.theme.white),
                        border_width=2,
                        role="header_cell" if row_no == 0 else "cell",
                    )
                    size = self._cell_font_size(cell, width, header_size if row_no == 0 else data_size, row_no == 0)
                    self._fitted_text(
                        canvas,
                        cell,
                        (x + 0.05, y + 0.05, width - 0.1, row_height - 0.1),
                        range(size, 5, -1),
                        color,
                        bold=row_no == 0,
                        align="center" if row_no == 0 else "left",
                        valign="middle",
                        role="header_text" if row_no == 0 else "cell_text",
                    )
                    x += width
            self._page_number(canvas)
            canvases.append(canvas)
            logger.debug("Created table page %d/%d with %d rows", page_no, total, len(page_rows))
        return canvases

    @staticmethod
    def _cell_font_size(cell: str, width: float, size: int, header: bool) -> int:
        if header:
            max_chars = width * 8
            if len(cell) > max_chars:
                return max(7, math.floor(size * max_chars / len(cell)))
            if len(cell) > 25:
                return min(size, 10)
            return size
        if len(cell) > 60:
            return max(6, size - 1)
        return size

    # ── Checklist ────────────────────────────────────────────────────────────

    def render_checklist(self, slide: ChecklistSlide, index: int, deck: Deck) -> list[Canvas]:
        """Brand background, freeform content on the left, checklist sidebar on the right."""
        cfg = self.layout
        canvas = self._new_canvas(slide, index, self.theme.brand)
        canvas.notes = slide.notes
        self._header(canvas, slide.title or "Slide Title", bar=False)

        content_y = 1.3
        if slide.checklist_heading:
            self._fitted_text(
                canvas,
                slide.checklist_heading,
                (0.5, 1.3, 6.7, 0.4),
                range(18, 11, -1),
                self.theme.white,
                bold=True,
                valign="middle",
                role="checklist_heading",
            )
            content_y = 1.8

        if slide.content:
            lines = [re.sub(r"^(?:\d+[.)]|[•◦\-])\s*", "", line.strip()) for line in slide.content]
            body = cap_chars("\n".join(f"• {line}" for line in lines if line), cfg.checklist_char_cap)
            box = (0.5, content_y, 6.7, 5.1 - content_y - 0.3)
            if not fits(body, 14, box[2], box[3]):
                deck.warn(f"Slide {index + 1}: checklist content truncated to fit")
            self._text(canvas, truncate_to_fit(body, 14, box[2], box[3]), box, 14, self.theme.white, role="body")

        canvas.add_rect(7.5, HEADER_BAR_HEIGHT, 2.5, SLIDE_HEIGHT - HEADER_BAR_HEIGHT, fill=self._color(self.theme.white), role="panel")
        y = 1.3
        if slide.checklist_panel_text:
            box = (7.6, y, 2.3, 1.0)
            text = truncate_to_fit(slide.checklist_panel_text, 8, box[2], box[3])
            self._text(canvas, text, box, 8, self.theme.text, role="panel_text")
            y += 1.1

        items = slide.checklist_items[: cfg.checklist_max_items]
        if len(slide.checklist_items) > cfg.checklist_max_items:
            deck.warn(
                f"Slide {index + 1}: checklist shows {cfg.checklist_max_items} of {len(slide.checklist_items)} items"
            )
        for item in items:
            symbol, color = ("✓", self.theme.check_green) if item.checked else ("☐", self.theme.unchecked)
            self._text(canvas, symbol, (7.6, y, 0.25, 0.25), 10, color, align="center", valign="middle", role="checkbox")
            box = (7.9, y, 1.9, 0.34)
            self._text(
                canvas, truncate_to_fit(item.text or "Item", 7, box[2], box[3]), box, 7, self.theme.text, valign="middle", role="checklist_item"
            )
            y += 0.35

        self._page_number(canvas, color=self.theme.white)
        return [canvas]

    # ── Textbox ──────────────────────────────────────────────────────────────

    def render_textbox(self, slide: TextboxSlide, index: int, deck: Deck) -> list[Canvas]:
        """Up to two side-by-side boxes, each a header bar over a gray or teal panel."""
        canvas = self._new_canvas(slide, index, self.theme.page_background)
        canvas.notes = slide.notes
        self._header(canvas, slide.title or "Slide Title")

        if len(slide.boxes) > 2:
            deck.warn(f"Slide {index + 1}: only the first 2 of {len(slide.boxes)} text boxes are shown")
        for position, box in enumerate(slide.boxes[:2]):
            x = 0.8 if position == 0 else 5.3
            canvas.add_rect(x, 1.6, 4.2, 0.6, fill=self._color(self.theme.brand), role="box_header")
            self._fitted_text(
                canvas,
                box.header or TEXTBOX_DEFAULT_HEADER,
                (x + 0.2, 1.7, 3.8, 0.4),
                range(14, 9, -1),
                self.theme.white,
                bold=True,
                valign="middle",
                role="box_header_text",
            )
            fill = self.theme.teal if box.color == "teal" else self.theme.gray
            canvas.add_rect(x, 2.2, 4.2, 2.9, fill=self._color(fill), role="box_body")
            content = cap_chars(box.content or TEXTBOX_DEFAULT_CONTENT, self.layout.textbox_char_cap)
            self._text(
                canvas, truncate_to_fit(content, 11, 3.8, 2.3), (x + 0.2, 2.4, 3.8, 2.3), 11, self.theme.text, role="box_text"
            )

        self._page_number(canvas)
        return [canvas]

    # ── Transition ───────────────────────────────────────────────────────────

    def render_transition(self, slide: TransitionSlide, index: int, deck: Deck) -> list[Canvas]:
        """Rotating background with the title in a solid box, or a bordered box for the alt variant."""
        canvas = self._new_canvas(slide, index)
        self._full_bleed(canvas, self.assets.transition_background(index), 20)
        title = (slide.title or "Transition").upper()

        if slide.kind is SlideType.TRANSITION_ALT:
            box = (2.0, 1.69, 6.0, 2.25)
            canvas.add_rect(*box, fill=None, border=self._color(self.theme.white), border_width=4, role="frame")
            self._fitted_text(
                canvas, title, box, range(40, 17, -2), self.theme.white, bold=True, align="center", valign="middle", role="title"
            )
        else:
            canvas.add_rect(0.5, 1.9, 6.0, 1.8, fill=self._color(self.theme.brand), role="frame")
            self._fitted_text(
                canvas, title, (0.8, 1.9, 5.4, 1.8), range(36, 17, -2), self.theme.white, bold=True, valign="middle", role="title"
            )

        canvas.add_picture(self.assets.logo, 8.0, 0.2, 1.6, 0.8, role="logo")
        self._page_number(canvas, color=self.theme.white)
        return [canvas]

    # ── Question of the month ────────────────────────────────────────────────

    def render_qotm(self, slide: QotmSlide, index: int, deck: Deck) -> list[Canvas]:
        """Scenario, rule and action sections, shrunk together until they fit."""
        canvas = self._new_canvas(slide, index, self.theme.page_background)
        canvas.notes = slide.notes
        self._header(canvas, slide.title or "Question of the Month")

        per_section = self.layout.qotm_bullets_per_section
        sections = [
            ("Scenario", self.theme.teal, slide.scenario[:per_section]),
            ("What the rule says", self.theme.gray, slide.rule[:per_section]),
            ("What employers should do", self.theme.teal, slide.action[:per_section]),
        ]
        sections = [s for s in sections if s[2]]

        total = len(slide.scenario) + len(slide.rule) + len(slide.action)
        font, bullet_h, spacing, banner_font = QOTM_DEFAULT_TIER
        for threshold, *tier in QOTM_TIERS:
            if total > threshold:
                font, bullet_h, spacing, banner_font = tier
                break

        start_y = 1.4
        banner_h, banner_step, gap = 0.4, 0.5, 0.1
        needed = sum(banner_step + len(b) * spacing for _, _, b in sections) + gap * max(0, len(sections) - 1)
        scale = 1.0
        if needed and start_y + needed > self.layout.max_y:
            scale = (self.layout.max_y - start_y) / needed
            logger.debug("Scaling Q&A-of-the-month layout by %.2f to fit", scale)
        banner_h, banner_step, gap = banner_h * scale, banner_step * scale, gap * scale
        spacing, bullet_h = spacing * scale, bullet_h * scale
        font = max(8, round(font * scale))
        banner_font = max(8, round(banner_font * scale))

        y = start_y
        for position, (label, fill, bullets) in enumerate(sections):
            if position:
                y += gap
            canvas.add_rect(0.6, y, 8.8, banner_h, fill=self._color(fill), role="banner")
            self._text(
                canvas,
                label,
                (0.8, y, 8.4, banner_h),
                banner_font,
                self.theme.brand,
                bold=True,
                valign="middle",
                role="banner_label",
            )
            y += banner_step
            for bullet in bullets:
                glyph_box = (0.8, y, GLYPH_WIDTH, min(glyph_height(font, bullet_h), spacing))
                self._text(canvas, "•", glyph_box, font, self.theme.text, role="bullet")
                text = truncate_to_fit(bullet, font, 8.3, bullet_h)
                self._text(canvas, text, (1.1, y, 8.3, bullet_h), font, self.theme.text, role="body")
                y += spacing

        self._page_number(canvas)
        return [canvas]

    # ── Thank you ────────────────────────────────────────────────────────────

    def render_thankyou(self, slide: Slide, index: int, deck: Deck) -> list[Canvas]:
        """Fixed closing slide with the Q&A line and the disclaimer."""
        canvas = self._new_canvas(slide, index)
        self._full_bleed(canvas, self.assets.thankyou_background, 15)
        self._text(canvas, "THANK YOU!", (1.0, 1.8, 6.0, 1.0), 48, self.theme.white, valign="middle", role="title")
        self._text(canvas, "Q&A", (1.0, 2.8, 6.0, 0.9), 48, self.theme.white, valign="middle", role="subtitle")
        self._text(canvas, DISCLAIMER, (1.0, 4.5, 5.5, 0.8), 10, self.theme.white, role="disclaimer")
        canvas.add_picture(self.assets.logo, *CORNER_LOGO_BOX, role="logo")
        self._page_number(canvas, color=self.theme.white)
        return [canvas]


def render(
    slides: list[Slide],
    theme: Optional[Theme] = None,
    assets: Optional[AssetPaths] = None,
    layout: Optional[LayoutConfig] = None,
    today: Optional[date] = None,
) -> Deck:
    """Render *slides* with a fresh ``SlideLayoutEngine``."""
    return SlideLayoutEngine(theme, assets, layout, today).render(slides)
