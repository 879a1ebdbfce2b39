"""
Article importance classification.

Each article of a briefing document is scored against weighted keyword
signals and assigned one tier (critical / standard / minor). The tier caps
how many dedicated slides the article may occupy in the final deck.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Optional

from briefdeck.config import ClassifierConfig
from briefdeck.models import Article, Classification, Importance

logger = logging.getLogger(__name__)

DEFAULT_CLASSIFIER = ClassifierConfig()

# Derived features: (pattern, score bucket, points)
_HEURISTICS = (
    (re.compile(r"action\s+items?:"), "standard", 2),
    (re.compile(r"compliance\s+quick\s+check"), "standard", 2),
    (re.compile(r"deadline|due\s+date|by\s+\w+\s+\d+"), "critical", 1),
    (re.compile(r"applies\s+to:"), "standard", 1),
    (re.compile(r"penalty|fine|sanction"), "critical", 2),
)

_ARTICLE_SPLIT_RE = re.compile(r"\n(?=\d+\.\s+)")
_ARTICLE_TITLE_RE = re.compile(r"^\d+\.\s+([^\n]+)")
_HINT_RES = (
    (re.compile(r"\[CRITICAL\]", re.IGNORECASE), Importance.CRITICAL),
    (re.compile(r"\[STANDARD\]", re.IGNORECASE), Importance.STANDARD),
    (re.compile(r"\[MINOR\]", re.IGNORECASE), Importance.MINOR),
)


@dataclass(frozen=True)
class Scores:
    critical: int = 0
    standard: int = 0
    minor: int = 0


def _count(patterns: Iterable[str], text: str, weight: int) -> int:
    return sum(weight for pattern in patterns if re.search(pattern, text, re.IGNORECASE))


def score_article(article: Article, config: Optional[ClassifierConfig] = None) -> Scores:
    """Compute the three tier scores for an article. Pure."""
    config = config or DEFAULT_CLASSIFIER
    text = f"{article.title or ''} {article.content or ''}".lower()

    totals = {
        "critical": _count(config.critical_patterns, text, config.critical_weight),
        "standard": _count(config.standard_patterns, text, config.standard_weight),
        "minor": _count(config.minor_patterns, text, config.minor_weight),
    }
    for pattern, bucket, points in _HEURISTICS:
        if pattern.search(text):
            totals[bucket] += points

    word_count = len(text.split())
    if word_count > config.long_article_words:
        totals["critical"] += 1
    if word_count < config.short_article_words:
        totals["minor"] += 2

    return Scores(**totals)


def decide(scores: Scores) -> Importance:
    """Map scores to a tier. The first matching rule wins."""
    if scores.critical >= 2:
        return Importance.CRITICAL
    if scores.critical >= 1 or scores.standard >= 2:
        return Importance.STANDARD
    if scores.minor >= 2 or (scores.critical == 0 and scores.standard <= 1):
        return Importance.MINOR
    return Importance.STANDARD


def classify(article: Article, config: Optional[ClassifierConfig] = None) -> Importance:
    """Assign an importance tier to *article*.

    ``metadata["importance_hint"]`` overrides scoring entirely.
    """
    hint = (article.metadata or {}).get("importance_hint")
    if hint:
        try:
            importance = Importance(str(hint).lower())
        except ValueError:
            logger.warning("Ignoring unknown importance hint %r for %r", hint, article.title)
        else:
            logger.info("Manual importance override: %s for %r", importance.value, article.title)
            return importance

    scores = score_article(article, config)
    importance = decide(scores)
    logger.info(
        "Classified %r as %s (critical: %d, standard: %d, minor: %d)",
        (article.title or "")[:50],
        importance.value.upper(),
        scores.critical,
        scores.standard,
        scores.minor,
    )
    return importance


def parse_articles(document_text: str) -> list[Article]:
    """Split document text into numbered articles ("1. Title" lines).

    A document without numbered articles becomes a single article titled
    "Document Content".
    """
    chunks = _ARTICLE_SPLIT_RE.split(document_text or "")
    articles: list[Article] = []
    if len(chunks) > 1:
        for chunk in chunks:
            match = _ARTICLE_TITLE_RE.match(chunk)
            if not match:
                continue
            content = chunk[match.end():].strip()
            metadata = {}
            for pattern, importance in _HINT_RES:
                if pattern.search(content):
                    metadata["importance_hint"] = importance.value
            articles.append(Article(title=match.group(1).strip(), content=content, metadata=metadata))
    else:
        articles.append(Article(title="Document Content", content=document_text or ""))

    logger.info("Parsed %d articles from document", len(articles))
    return articles


def classify_articles(
    articles: Iterable[Article], config: Optional[ClassifierConfig] = None
) -> list[Classification]:
    return [Classification(title=a.title, importance=classify(a, config)) for a in articles]


def classify_document(
    document_text: str, config: Optional[ClassifierConfig] = None
) -> list[Classification]:
    """Parse *document_text* into articles and classify each one."""
    return classify_articles(parse_articles(document_text), config)


def build_classification_guidance(classifications: Iterable[Classification]) -> str:
    """Plain-text slide budget guidance to hand to the structuring oracle."""
    groups: dict[Importance, list[Classification]] = {tier: [] for tier in Importance}
    for item in classifications:
        groups[item.importance].append(item)

    lines = ["ARTICLE CLASSIFICATION & SLIDE COUNT ENFORCEMENT:", ""]
    if groups[Importance.CRITICAL]:
        lines.append("CRITICAL ARTICLES (2 slides max each):")
        for item in groups[Importance.CRITICAL]:
            lines.append(
                f'  - "{item.title}": overview slide + employer implications checklist (MAX 2 SLIDES)'
            )
        lines.append("")
    if groups[Importance.STANDARD]:
        lines.append("STANDARD ARTICLES (1 slide max each):")
        for item in groups[Importance.STANDARD]:
            lines.append(f'  - "{item.title}": single combined overview + actions slide (MAX 1 SLIDE)')
        lines.append("")
    if groups[Importance.MINOR]:
        lines.append("MINOR ITEMS (roll up into section roundup slides):")
        for item in groups[Importance.MINOR]:
            lines.append(f'  - "{item.title}": 1-2 bullets in a section roundup (NO DEDICATED SLIDES)')
        lines.append("")
        lines.append("Group minor items by section (In the News, Federal Updates, Hot Topics);")
        lines.append('title roundups "[Section Name] - Quick Updates".')
        lines.append("")

    lines.extend(
        [
            "HARD ENFORCEMENT RULES:",
            "  - CRITICAL articles: never exceed 2 slides",
            "  - STANDARD articles: never exceed 1 slide",
            "  - MINOR items: never create dedicated slides, only roundup bullets",
            "  - Move detail that exceeds slide limits into speaker notes",
        ]
    )
    return "\n".join(lines)
