"""
Text cleanup for oracle output.

``clean_text`` normalizes single-line slide strings; ``clean_notes`` does the
same for speaker notes but keeps line structure. ``notes_html_to_text`` turns
the notes markup the oracle is asked to produce into presenter-readable text.
"""

import html
import logging
import re

logger = logging.getLogger(__name__)

# Typographic characters mapped to ASCII equivalents
_CHAR_REPLACEMENTS = {
    "–": "-",  # en dash
    "—": "-",  # em dash
    "‘": "'",
    "’": "'",
    "“": '"',
    "”": '"',
    "…": "...",
    "§": "Section",
    "®": "(R)",
    "©": "(C)",
    "™": "(TM)",
}
_CHAR_RE = re.compile("|".join(re.escape(c) for c in _CHAR_REPLACEMENTS))

_ZERO_WIDTH_RE = re.compile("[\u200b-\u200d\ufeff]")
# General and supplemental punctuation blocks (bullet glyph excepted), replacement char
_PUNCT_BLOCK_RE = re.compile("[\u2000-\u2021\u2023-\u206f\u2e00-\u2e7f\ufffd]")
_CONTROL_RE = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")
_WS_RE = re.compile(r"\s+")
_LEADING_WS_RE = re.compile(r"^[ \t]*")


def _normalize_chars(text: str) -> str:
    text = html.unescape(text)
    text = _CHAR_RE.sub(lambda m: _CHAR_REPLACEMENTS[m.group(0)], text)
    text = _ZERO_WIDTH_RE.sub("", text)
    text = _PUNCT_BLOCK_RE.sub(" ", text)
    text = text.replace("\u00a0", " ")
    return _CONTROL_RE.sub("", text)


def clean_text(text, keep_indent: bool = False) -> str:
    """Decode entities, ASCII-fold punctuation and collapse whitespace.

    With *keep_indent*, leading spaces (the sub-item marker used by agenda and
    content lists) survive the cleanup.
    """
    if text is None:
        return ""
    text = str(text)
    indent = _LEADING_WS_RE.match(text).group(0).replace("\t", "  ") if keep_indent else ""
    cleaned = _WS_RE.sub(" ", _normalize_chars(text)).strip()
    return indent + cleaned if cleaned else ""


def clean_notes(text) -> str:
    """Like ``clean_text`` but keeps newlines, for speaker notes."""
    if text is None:
        return ""
    text = _normalize_chars(str(text)).replace("\r\n", "\n").replace("\r", "\n")
    lines = [_WS_RE.sub(" ", line).strip() for line in text.split("\n")]
    text = "\n".join(lines)
    return re.sub(r"\n{3,}", "\n\n", text).strip()


def strip_code_fences(text: str) -> str:
    """Remove Markdown code-fence markers (```json, ```html, ```)."""
    text = re.sub(r"```[a-zA-Z]*[ \t]*\n?", "", text or "")
    return text.strip()


# ── Speaker notes ─────────────────────────────────────────────────────────────

_NOTES_MARKUP_RE = re.compile(r"<(p|ul|li|strong)\b[^>]*>", re.IGNORECASE)
_LABEL_RE = re.compile(r"^([A-Z][^:.!?\n]*:)", re.MULTILINE)
_SENTENCE_SPLIT_RE = re.compile(r"\.\s+(?=[A-Z])")
_ACTION_LEAD_RE = re.compile(
    r"^(Employers?|Objecting|Review|Update|Consult|Identify|Assess|Coordinate|"
    r"Train|Monitor|Track|File|Align|Ensure|Note|Consider)",
    re.IGNORECASE,
)
AUTO_FORMAT_MIN_LENGTH = 100
LIST_ITEM_MAX_LENGTH = 200


def has_notes_markup(text: str) -> bool:
    return bool(_NOTES_MARKUP_RE.search(text or ""))


def auto_format_plain_notes(plain: str) -> str:
    """Re-emit plain prose notes as ``<p>`` paragraphs and ``<ul>`` lists.

    Label lines ("Applies to:") become bold paragraphs; sentences led by an
    action word become list items, consecutive ones sharing one list.
    """
    formatted = _LABEL_RE.sub(r"<p><strong>\1</strong></p><p>", plain.strip())
    sentences = _SENTENCE_SPLIT_RE.split(formatted)

    parts: list[tuple[str, object]] = []
    current: list[str] = []
    for idx, sentence in enumerate(sentences):
        sentence = sentence.strip()
        if _ACTION_LEAD_RE.match(sentence) and len(sentence) < LIST_ITEM_MAX_LENGTH:
            current.append(sentence.rstrip(".") + ".")
            continue
        if current:
            parts.append(("list", current))
            current = []
        if sentence:
            terminal = "." if idx < len(sentences) - 1 else ""
            parts.append(("paragraph", sentence + terminal))
    if current:
        parts.append(("list", current))

    chunks = []
    for kind, value in parts:
        if kind == "paragraph":
            chunks.append(f"<p>{value}</p>")
        else:
            items = "\n".join(f"  <li>{item}</li>" for item in value)
            chunks.append(f"<ul>\n{items}\n</ul>")
    logger.debug("Auto-formatted plain notes into %d sections", len(parts))
    return "\n\n".join(chunks)


def notes_html_to_text(markup: str) -> str:
    """Convert notes markup to plain text with paragraph breaks and "• " items.

    Prose without any markup and longer than ``AUTO_FORMAT_MIN_LENGTH`` is
    structured with ``auto_format_plain_notes`` first.
    """
    markup = markup or ""
    if not has_notes_markup(markup) and len(markup.strip()) > AUTO_FORMAT_MIN_LENGTH:
        logger.warning("Speaker notes carry no markup, auto-formatting")
        markup = auto_format_plain_notes(markup)

    text = re.sub(r"<br\s*/?>", "\n", markup, flags=re.IGNORECASE)
    text = re.sub(r"</p>", "\n\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<p[^>]*>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"</li>", "", text, flags=re.IGNORECASE)
    text = re.sub(r"<li[^>]*>", "\n• ", text, flags=re.IGNORECASE)
    text = re.sub(r"</?ul[^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"</?h[1-6][^>]*>", "\n", text, flags=re.IGNORECASE)
    text = re.sub(r"<[^>]*>", "", text)
    text = text.replace("&bull;", "•")
    text = re.sub(r"\n\s*\n\s*\n+", "\n\n", text)
    text = re.sub(r"\n[ \t]+", "\n", text)
    return clean_notes(text)
