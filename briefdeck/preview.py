"""HTML preview assembly: the template's <head> around the oracle's slide markup."""

import logging
import re

from bs4 import BeautifulSoup

from briefdeck.text import strip_code_fences

logger = logging.getLogger(__name__)

_NUMBERED_LABEL_RE = re.compile(r"^\d+\.\s*[^:<\n]*:\s*", re.MULTILINE)
_TEMPLATE_MEDIA_RE = re.compile(r"url\((['\"]?)desiredresults/assets/ppt/media/")

DEFAULT_HEAD = '<head><meta charset="utf-8"><title>Presentation</title></head>'


def clean_slide_markup(markup: str) -> str:
    """Drop Markdown fences and stray "1. Title Page:" label prefixes."""
    cleaned = strip_code_fences(markup or "")
    return _NUMBERED_LABEL_RE.sub("", cleaned).strip()


def template_head(template_html: str) -> str:
    """The template's <head> element, with media URLs pointed at /assets/."""
    if not template_html:
        return DEFAULT_HEAD
    soup = BeautifulSoup(template_html, "lxml")
    if soup.head is None:
        logger.warning("Template has no <head>, using a bare one")
        return DEFAULT_HEAD
    return _TEMPLATE_MEDIA_RE.sub(r"url(\1/assets/", str(soup.head))


def assemble_preview(template_html: str, slide_markup) -> str:
    """Full preview document from the template head and one or more markup chunks."""
    chunks = [slide_markup] if isinstance(slide_markup, str) else list(slide_markup)
    body = "\n\n".join(clean_slide_markup(chunk) for chunk in chunks)
    return f"<!DOCTYPE html>\n<html>\n{template_head(template_html)}\n<body>\n{body}\n</body>\n</html>"
