"""Slide-count caps per classified article."""

import logging
import re

from briefdeck.models import Classification, Slide

logger = logging.getLogger(__name__)

_NON_WORD_RE = re.compile(r"[^a-z0-9\s]")


def normalize_title(title: str) -> str:
    return _NON_WORD_RE.sub("", (title or "").lower())


def significant_words(title: str) -> list[str]:
    return [w for w in normalize_title(title).split() if len(w) > 3]


def match_article(slide_title: str, classifications: dict[str, tuple[list[str], Classification]]):
    """First classification whose significant title words appear in *slide_title*."""
    normalized = normalize_title(slide_title)
    for words, classification in classifications.values():
        if not words:
            continue
        shared = sum(1 for word in words if word in normalized)
        if shared >= min(2, len(words)):
            return classification
    return None


def enforce(slides: list[Slide], classifications: list[Classification]) -> list[Slide]:
    """Drop matched slides beyond their article's budget, keeping order.

    Structural slides and slides that match no article always pass through.
    """
    lookup: dict[str, tuple[list[str], Classification]] = {}
    for classification in classifications:
        lookup[normalize_title(classification.title)] = (significant_words(classification.title), classification)

    used: dict[str, int] = {}
    kept = []
    for slide in slides:
        if slide.is_structural:
            kept.append(slide)
            continue

        article = match_article(slide.title, lookup)
        if article is None:
            kept.append(slide)
            continue

        count = used.get(article.title, 0)
        if count < article.slide_count:
            used[article.title] = count + 1
            kept.append(slide)
            logger.debug(
                "Slide %r -> article %r (%d/%d)", slide.title[:30], article.title[:30], count + 1, article.slide_count
            )
        else:
            logger.info(
                "Skipped slide %r: exceeds %s limit of %d slide(s)",
                slide.title[:30],
                article.importance.value.upper(),
                article.slide_count,
            )

    logger.info("Enforced slide caps: %d -> %d slides", len(slides), len(kept))
    return kept
