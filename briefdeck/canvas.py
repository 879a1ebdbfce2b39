"""
Render target for the layout engine.

A ``Canvas`` is one fixed-size slide described as positioned primitives
(text boxes, filled rectangles, pictures). Canvases carry no python-pptx
objects, so layout can be inspected and tested without writing a file;
``pptx_writer`` turns them into a presentation.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional, Union

from briefdeck.config import SLIDE_HEIGHT, SLIDE_WIDTH

logger = logging.getLogger(__name__)


@dataclass
class Box:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class TextBox(Box):
    text: str = ""
    font_size: float = 14
    color: str = "333333"
    bold: bool = False
    align: str = "left"  # left | center | right
    valign: str = "top"  # top | middle | bottom
    font: str = "Lato"
    role: str = "text"


@dataclass
class Rect(Box):
    fill: Optional[str] = None
    transparency: int = 0  # percent, 100 = fully transparent
    border: Optional[str] = None
    border_width: float = 0.0  # points
    role: str = "shape"


@dataclass
class Picture(Box):
    name: str = ""  # file name inside the asset directory
    role: str = "picture"


Element = Union[TextBox, Rect, Picture]


def _clamp(left: float, top: float, width: float, height: float):
    """Clip a box to the slide rectangle."""
    new_left = min(max(left, 0.0), SLIDE_WIDTH)
    new_top = min(max(top, 0.0), SLIDE_HEIGHT)
    new_width = max(0.0, min(width - (new_left - left), SLIDE_WIDTH - new_left))
    new_height = max(0.0, min(height - (new_top - top), SLIDE_HEIGHT - new_top))
    return new_left, new_top, new_width, new_height


@dataclass
class Canvas:
    """One 10 x 5.625 slide."""

    slide_type: str
    source_index: int
    background: Optional[str] = None
    notes: str = ""
    page_label: str = ""
    elements: list[Element] = field(default_factory=list)
    width: float = SLIDE_WIDTH
    height: float = SLIDE_HEIGHT

    def _place(self, element: Element) -> Element:
        box = _clamp(element.left, element.top, element.width, element.height)
        if box != (element.left, element.top, element.width, element.height):
            logger.debug(
                "Clamped %s on slide %d from (%.2f, %.2f, %.2f, %.2f)",
                getattr(element, "role", "element"),
                self.source_index + 1,
                element.left,
                element.top,
                element.width,
                element.height,
            )
            element.left, element.top, element.width, element.height = box
        self.elements.append(element)
        return element

    def add_text(self, text: str, left: float, top: float, width: float, height: float, **style) -> TextBox:
        return self._place(TextBox(left, top, width, height, text=text, **style))

    def add_rect(self, left: float, top: float, width: float, height: float, **style) -> Rect:
        return self._place(Rect(left, top, width, height, **style))

    def add_picture(self, name: str, left: float, top: float, width: float, height: float, role: str = "picture") -> Picture:
        return self._place(Picture(left, top, width, height, name=name, role=role))

    # ── Queries ──────────────────────────────────────────────────────────────

    @property
    def texts(self) -> list[TextBox]:
        return [e for e in self.elements if isinstance(e, TextBox)]

    @property
    def rects(self) -> list[Rect]:
        return [e for e in self.elements if isinstance(e, Rect)]

    @property
    def pictures(self) -> list[Picture]:
        return [e for e in self.elements if isinstance(e, Picture)]

    def by_role(self, role: str) -> list[Element]:
        return [e for e in self.elements if getattr(e, "role", None) == role]

    def text_of(self, role: str) -> list[str]:
        return [e.text for e in self.texts if e.role == role]

    @property
    def title(self) -> str:
        titles = self.text_of("title")
        return titles[0] if titles else ""


@dataclass
class Deck:
    """Rendered canvases plus the anomalies recovered while rendering them."""

    canvases: list[Canvas] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.canvases)

    def __iter__(self):
        return iter(self.canvases)

    def warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)
