"""Plain-text extraction from uploaded briefing documents."""

import logging
from pathlib import Path
from typing import Union

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from briefdeck.errors import InputError

logger = logging.getLogger(__name__)

ACCEPTED_SUFFIXES = (".docx",)


def check_document_path(path: Union[str, Path]) -> Path:
    """Reject missing files and anything that is not a ``.docx``."""
    path = Path(path)
    if not path.is_file():
        raise InputError(f"No file uploaded: {path} does not exist")
    if path.suffix.lower() not in ACCEPTED_SUFFIXES:
        raise InputError(f"Only .docx files are allowed, got {path.name}")
    return path


def read_docx_text(path: Union[str, Path]) -> str:
    """Raw text of a .docx file: paragraphs, then table cells, blank-line separated."""
    path = check_document_path(path)
    try:
        doc = Document(str(path))
    except (PackageNotFoundError, KeyError, ValueError) as exc:
        raise InputError(f"Cannot read {path.name} as a Word document: {exc}") from exc

    parts = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))

    text = "\n\n".join(parts)
    logger.info("Extracted %d characters from %s", len(text), path.name)
    return text


def read_document_text(path: Union[str, Path]) -> str:
    """Text of a .docx, or of a plain .txt file as-is."""
    path = Path(path)
    if path.suffix.lower() == ".txt" and path.is_file():
        return path.read_text(encoding="utf-8")
    return read_docx_text(path)
