"""
pptx_writer.py - Serialize rendered canvases to a PowerPoint file.

Each ``Canvas`` becomes one slide on the blank layout. Text boxes, filled
rectangles and pictures are replayed in canvas order with python-pptx, so
z-order matches the order the layout engine placed them in.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from lxml import etree
from pptx import Presentation
from pptx.enum.shapes import MSO_SHAPE
from pptx.enum.text import MSO_ANCHOR, PP_ALIGN
from pptx.oxml.ns import qn
from pptx.util import Inches, Pt

from briefdeck.canvas import Canvas, Deck, Picture, Rect, TextBox
from briefdeck.config import SLIDE_HEIGHT, SLIDE_WIDTH, AssetPaths, Theme
from briefdeck.errors import OutputError
from briefdeck.validators import hex_to_rgb, validate_color

logger = logging.getLogger(__name__)

BLANK_LAYOUT = 6

_ALIGN = {
    "left": PP_ALIGN.LEFT,
    "center": PP_ALIGN.CENTER,
    "right": PP_ALIGN.RIGHT,
}
_ANCHOR = {
    "top": MSO_ANCHOR.TOP,
    "middle": MSO_ANCHOR.MIDDLE,
    "bottom": MSO_ANCHOR.BOTTOM,
}


# ── Low-level shape helpers ───────────────────────────────────────────────────


def set_slide_background(slide, color: str):
    fill = slide.background.fill
    fill.solid()
    fill.fore_color.rgb = hex_to_rgb(color)


def _set_font(run, name: str, size: float, bold: bool, color: str):
    run.font.name = name
    run.font.size = Pt(size)
    run.font.bold = bold
    run.font.color.rgb = hex_to_rgb(color)


def set_fill_transparency(shape, transparency: int):
    """Write an ``a:alpha`` child on the shape's solid fill colour.

    *transparency* is a percentage; DrawingML stores opacity in thousandths
    of a percent.
    """
    srgb = shape.fill._xPr.find(qn("a:solidFill")).find(qn("a:srgbClr"))
    for old in srgb.findall(qn("a:alpha")):
        srgb.remove(old)
    alpha = etree.SubElement(srgb, qn("a:alpha"))
    alpha.set("val", str(int((100 - transparency) * 1000)))


def add_text_box(slide, element: TextBox):
    """Add a text box; every line of the text becomes its own paragraph."""
    box = slide.shapes.add_textbox(
        Inches(element.left), Inches(element.top), Inches(element.width), Inches(element.height)
    )
    tf = box.text_frame
    tf.word_wrap = True
    tf.auto_size = None
    tf.vertical_anchor = _ANCHOR.get(element.valign, MSO_ANCHOR.TOP)

    color = validate_color(element.color, "333333")
    for line_idx, line in enumerate(element.text.split("\n")):
        p = tf.paragraphs[0] if line_idx == 0 else tf.add_paragraph()
        p.alignment = _ALIGN.get(element.align, PP_ALIGN.LEFT)
        run = p.add_run()
        run.text = line
        _set_font(run, element.font, element.font_size, element.bold, color)
    return box


def add_filled_box(slide, element: Rect):
    shape = slide.shapes.add_shape(
        MSO_SHAPE.RECTANGLE,
        Inches(element.left),
        Inches(element.top),
        Inches(element.width),
        Inches(element.height),
    )
    if element.fill:
        shape.fill.solid()
        shape.fill.fore_color.rgb = hex_to_rgb(validate_color(element.fill))
        if element.transparency:
            set_fill_transparency(shape, element.transparency)
    else:
        shape.fill.background()
    if element.border:
        shape.line.color.rgb = hex_to_rgb(validate_color(element.border))
        shape.line.width = Pt(element.border_width or 1.0)
    else:
        shape.line.fill.background()
    return shape


# ── Writer ────────────────────────────────────────────────────────────────────


class DeckWriter:
    """Builds a ``pptx.Presentation`` from a rendered ``Deck``."""

    def __init__(self, assets: Optional[AssetPaths] = None, theme: Optional[Theme] = None):
        self.assets = assets or AssetPaths()
        self.theme = theme or Theme()
        self.prs = Presentation()
        self.prs.slide_width = Inches(SLIDE_WIDTH)
        self.prs.slide_height = Inches(SLIDE_HEIGHT)
        self.blank_layout = self.prs.slide_layouts[BLANK_LAYOUT]
        self.warnings: list[str] = []

    def _warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)

    def add_picture(self, slide, element: Picture, slide_num: int):
        path = self.assets.path(element.name)
        if not path.is_file():
            self._warn(f"Slide {slide_num}: image asset {path} not found, using a brand-colour block")
            return add_filled_box(
                slide,
                Rect(element.left, element.top, element.width, element.height, fill=self.theme.brand, role=element.role),
            )
        return slide.shapes.add_picture(
            str(path), Inches(element.left), Inches(element.top), Inches(element.width), Inches(element.height)
        )

    def add_canvas(self, canvas: Canvas, slide_num: int):
        slide = self.prs.slides.add_slide(self.blank_layout)
        if canvas.background:
            set_slide_background(slide, canvas.background)

        for element in canvas.elements:
            if isinstance(element, TextBox):
                add_text_box(slide, element)
            elif isinstance(element, Rect):
                add_filled_box(slide, element)
            elif isinstance(element, Picture):
                self.add_picture(slide, element, slide_num)

        if canvas.notes:
            slide.notes_slide.notes_text_frame.text = canvas.notes
        logger.debug("Wrote slide %d (%s, %d shapes)", slide_num, canvas.slide_type, len(canvas.elements))
        return slide

    def build(self, deck: Deck) -> Presentation:
        for slide_num, canvas in enumerate(deck, start=1):
            self.add_canvas(canvas, slide_num)
        logger.info("Built presentation with %d slides", len(self.prs.slides))
        return self.prs

    def save(self, output_path: Union[str, Path]) -> Path:
        """Save the presentation. Raises ``OutputError`` when the file cannot be written."""
        output_path = Path(output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            self.prs.save(str(output_path))
        except OSError as exc:
            raise OutputError(f"Cannot write presentation: {exc}", path=output_path) from exc
        logger.info("Saved %s (%d slides)", output_path, len(self.prs.slides))
        return output_path


def write_deck(
    deck: Deck,
    output_path: Union[str, Path],
    assets: Optional[AssetPaths] = None,
    theme: Optional[Theme] = None,
) -> Path:
    """Build and save *deck* in one step."""
    writer = DeckWriter(assets, theme)
    writer.build(deck)
    deck.warnings.extend(writer.warnings)
    return writer.save(output_path)
