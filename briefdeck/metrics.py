"""
Text measurement heuristics for fitting text into fixed boxes.

Widths come from proportional-font metrics (fraction of the em size per
glyph); heights assume word wrap inside a text frame with 0.1" side margins.
All functions are pure and work in inches and points.
"""

import math

# ---------------------------------------------------------------------------
# Per-character width table (fraction of em-size), grouped by advance width.
# Lato and Arial are close enough that one table serves both.
# ---------------------------------------------------------------------------
_WIDTH_GROUPS: dict[float, str] = {
    0.19: "'",
    0.22: "ijl",
    0.26: "|",
    0.28: " !,./:;I[\\]ft",
    0.33: "()-`{}r",
    0.35: '"',
    0.39: "*",
    0.47: "^",
    0.50: "Jcksvxyz",
    0.56: "#$0123456789?L_abdeghnopqu",
    0.58: "+<=>~",
    0.61: "FTZ",
    0.67: "&ABEKPSVXY",
    0.72: "CDHNRUw",
    0.78: "GOQ",
    0.83: "Mm",
    0.89: "%",
    0.94: "W",
    1.02: "@",
}
CHAR_WIDTHS: dict[str, float] = {
    ch: width for width, chars in _WIDTH_GROUPS.items() for ch in chars
}
DEFAULT_CHAR_WIDTH = 0.56
BOLD_SCALE = 1.08

LINE_SPACING = 1.2
FRAME_PADDING = 0.10  # top + bottom text-frame margins, inches
MIN_USABLE_WIDTH_PT = 36.0


def text_width_pt(text: str, font_size_pt: float, bold: bool = False) -> float:
    """Estimated rendered width of a single line, in points."""
    total = sum(CHAR_WIDTHS.get(ch, DEFAULT_CHAR_WIDTH) for ch in text)
    width = total * font_size_pt
    return width * BOLD_SCALE if bold else width


def count_lines(
    text: str, font_size_pt: float, box_width_in: float, bold: bool = False
) -> float:
    """Number of rendered lines; blank paragraphs count as 0.4 of a line."""
    usable_pt = max((box_width_in - 0.20) * 72.0, MIN_USABLE_WIDTH_PT)
    lines = 0.0
    for para in text.split("\n"):
        stripped = para.strip()
        if not stripped:
            lines += 0.4
            continue
        width = text_width_pt(stripped, font_size_pt, bold)
        if width <= usable_pt:
            lines += 1
        else:
            # 5% allowance for ragged word-boundary breaks
            lines += max(2, math.ceil(width / usable_pt * 1.05))
    return lines


def estimate_text_height(
    text: str,
    font_size_pt: float,
    box_width_in: float,
    bold: bool = False,
    line_spacing: float = LINE_SPACING,
) -> float:
    """Height in inches needed to show *text* in a box of the given width."""
    line_height = font_size_pt / 72.0 * line_spacing
    return count_lines(text, font_size_pt, box_width_in, bold) * line_height + FRAME_PADDING


def fits(
    text: str, font_size_pt: float, box_width_in: float, box_height_in: float, bold: bool = False
) -> bool:
    return estimate_text_height(text, font_size_pt, box_width_in, bold) <= box_height_in


def fit_font_size(
    text: str,
    box_width_in: float,
    box_height_in: float,
    sizes,
    bold: bool = False,
) -> int:
    """First size in *sizes* (largest first) at which *text* fits; else the smallest."""
    chosen = None
    for size in sizes:
        chosen = size
        if fits(text, size, box_width_in, box_height_in, bold):
            break
    return chosen


def truncate_to_fit(
    text: str,
    font_size_pt: float,
    box_width_in: float,
    max_height_in: float,
    bold: bool = False,
) -> str:
    """Longest prefix of *text* that fits, with "..." appended when cut.

    Binary-searches whole paragraphs first, then words of the leading
    paragraph when not even one full paragraph fits.
    """
    if fits(text, font_size_pt, box_width_in, max_height_in, bold):
        return text

    paragraphs = text.split("\n")
    lo, hi = 0, len(paragraphs)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        candidate = "\n".join(paragraphs[:mid]) + "\n..."
        if fits(candidate, font_size_pt, box_width_in, max_height_in, bold):
            lo = mid
        else:
            hi = mid - 1
    if lo > 0:
        return "\n".join(paragraphs[:lo]) + "\n..."

    words = text.split()
    lo, hi = 0, len(words)
    while lo < hi:
        mid = (lo + hi + 1) // 2
        candidate = " ".join(words[:mid]) + "..."
        if fits(candidate, font_size_pt, box_width_in, max_height_in, bold):
            lo = mid
        else:
            hi = mid - 1
    return " ".join(words[: max(lo, 1)]) + "..."


def cap_chars(text: str, limit: int) -> str:
    """Hard character cap with an ellipsis marker."""
    return text if len(text) <= limit else text[:limit] + "..."


# ---------------------------------------------------------------------------
# Bullet items
# ---------------------------------------------------------------------------
BULLET_MIN_HEIGHT = 0.35


def estimate_bullet_height(text: str, width_in: float, font_size_pt: float = 14) -> float:
    """Height reserved for one bullet item; at least one comfortable line.

    Grows with the rendered width of *text* for a fixed box width and size.
    """
    return max(BULLET_MIN_HEIGHT, estimate_text_height(text, font_size_pt, width_in))
