"""Color and header-font coercion shared by every slide renderer."""

import logging
import re
from typing import Optional

from pptx.dml.color import RGBColor

logger = logging.getLogger(__name__)

_HEX6 = re.compile(r"^[0-9A-F]{6}$")
_HEX3 = re.compile(r"^[0-9A-F]{3}$")

# (minimum exclusive title length, point size), longest titles first
HEADER_FONT_BANDS = ((80, 20), (60, 22), (45, 24), (35, 26))
HEADER_FONT_DEFAULT = 28


def validate_color(value, default: str = "000000") -> str:
    """Coerce *value* to an uppercase 6-digit hex string, or return *default*.

    Accepts ``RGB`` and ``RRGGBB`` with or without a leading ``#`` in any
    case. Anything else, including numbers and ``None``, yields *default*.
    """
    if not isinstance(value, str):
        if value is not None:
            logger.warning("Non-string color %r, using default %s", value, default)
        return default

    candidate = value.strip()
    if candidate.startswith("#"):
        candidate = candidate[1:]
    candidate = candidate.upper()

    if _HEX6.match(candidate):
        return candidate
    if _HEX3.match(candidate):
        return "".join(c * 2 for c in candidate)

    if candidate not in ("", "NULL", "UNDEFINED"):
        logger.warning("Invalid color %r, using default %s", value, default)
    return default


def get_header_font_size(title: Optional[str]) -> int:
    """Header point size for a slide title; longer titles get smaller fonts."""
    length = len(title or "")
    for threshold, size in HEADER_FONT_BANDS:
        if length > threshold:
            return size
    return HEADER_FONT_DEFAULT


def hex_to_rgb(hex_str: str) -> RGBColor:
    """Convert a (validated) hex string to an RGBColor."""
    hex_str = validate_color(hex_str)
    return RGBColor(int(hex_str[0:2], 16), int(hex_str[2:4], 16), int(hex_str[4:6], 16))
