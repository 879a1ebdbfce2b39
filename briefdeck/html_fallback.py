"""
Fallback slide extraction from slide HTML.

Used only when the oracle's structured reply is unusable. Slides are found
by the CSS class markers of the briefing template (``div.slide``,
``div.agenda-slide``, ``div.content-slide`` ...) and their text is pulled out
heuristically. Never raises; returns whatever it could recognise.
"""

import logging
from copy import deepcopy
from typing import Optional

from bs4 import BeautifulSoup, Tag

from briefdeck.models import (
    AgendaSlide,
    ContentSlide,
    GoDeeperSlide,
    Slide,
    TableSlide,
    ThankYouSlide,
    TitleSlide,
    TransitionAltSlide,
    TransitionSlide,
)
from briefdeck.text import clean_text

logger = logging.getLogger(__name__)

SLIDE_CLASSES = (
    "slide",
    "agenda-slide",
    "content-slide",
    "table-slide",
    "transition-slide",
    "transition-alt-slide",
    "thankyou-slide",
)


def get_text(element: Optional[Tag]) -> str:
    """Cleaned text of an element, with <br> tags read as spaces."""
    if element is None:
        return ""
    el_copy = deepcopy(element)
    for br in el_copy.find_all("br"):
        br.replace_with(" ")
    return clean_text(el_copy.get_text(" "))


def _classes(element: Tag) -> list[str]:
    return element.get("class") or []


def _title_slide(div: Tag) -> Optional[Slide]:
    content = div.find("div", class_="content")
    if content is None:
        logger.debug("Title slide without a content div, skipping")
        return None
    title = get_text(content.find("div", class_="title")) or "Presentation Title"
    subtitle = get_text(content.find("div", class_="subtitle"))
    return TitleSlide(title=title, subtitle=subtitle)


def _agenda_slide(div: Tag) -> Slide:
    items = []
    for li in div.find_all("li", class_="agenda-item"):
        li = deepcopy(li)
        for mark in li.find_all("span", class_="agenda-checkmark"):
            mark.decompose()
        text = get_text(li).replace("✓", "").strip()
        if not text:
            continue
        if "nested" in _classes(li):
            text = "  " + text
        items.append(text)
    return AgendaSlide(title="Agenda", items=items)


def _content_slide(div: Tag) -> Optional[Slide]:
    title = get_text(div.find("div", class_="content-title")) or "Content Slide"
    texts = [get_text(li) for li in div.find_all("li")]
    if not any(texts):
        texts = [get_text(p) for p in div.find_all("p", class_="content-paragraph")]

    bullets = [t if t.startswith("•") else f"• {t}" for t in texts if t]
    if not bullets:
        logger.debug("Content slide %r has no bullets, skipping", title)
        return None
    if "go deeper" in title.lower():
        return GoDeeperSlide(title=title, content=bullets)
    return ContentSlide(title=title, content=bullets, bullets=True)


def _table_slide(div: Tag) -> Optional[Slide]:
    title = get_text(div.find("div", class_="table-title")) or "Table"
    table = div.find("table")
    if table is None:
        logger.debug("Table slide %r has no <table>, skipping", title)
        return None
    headers = [h for h in (get_text(th) for th in table.find_all("th")) if h]
    rows = []
    for tr in table.find_all("tr")[1:]:
        cells = [get_text(td) for td in tr.find_all("td")]
        if cells:
            rows.append(cells)
    if not headers or not rows:
        logger.debug("Table slide %r had no usable data, skipping", title)
        return None
    rows = [(row + [""] * len(headers))[: len(headers)] for row in rows]
    return TableSlide(title=title, headers=headers, rows=rows)


def _transition_slide(div: Tag, alternate: bool) -> Slide:
    heading = div.find(["h1", "h2", "div"], class_=lambda c: c and "title" in c) or div
    cls = TransitionAltSlide if alternate else TransitionSlide
    return cls(title=get_text(heading))


def _slide_from_div(div: Tag) -> Optional[Slide]:
    classes = _classes(div)
    if "agenda-slide" in classes:
        return _agenda_slide(div)
    if "content-slide" in classes:
        return _content_slide(div)
    if "table-slide" in classes:
        return _table_slide(div)
    if "transition-alt-slide" in classes:
        return _transition_slide(div, alternate=True)
    if "transition-slide" in classes:
        return _transition_slide(div, alternate=False)
    if "thankyou-slide" in classes:
        return ThankYouSlide(title="THANK YOU!")
    if "slide" in classes:
        return _title_slide(div)
    return None


def extract_slides_from_html(html: str) -> list[Slide]:
    """Recognise template slides in *html*, in document order."""
    if not html or not html.strip():
        return []
    soup = BeautifulSoup(html, "lxml")
    slides: list[Slide] = []
    seen_title = False
    for div in soup.find_all("div", class_=SLIDE_CLASSES):
        if "slide" in _classes(div) and len(_classes(div)) == 1:
            # Only the first bare div.slide is the title slide
            if seen_title:
                continue
            seen_title = True
        slide = _slide_from_div(div)
        if slide is not None:
            slides.append(slide)
    logger.info("Fallback extraction found %d slides", len(slides))
    return slides
