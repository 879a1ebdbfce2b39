"""
Pytest configuration and shared fixtures.
"""

import base64
import json
import logging
import tempfile
from datetime import date
from pathlib import Path
from typing import Generator

import pytest

from briefdeck.config import AssetPaths, LayoutConfig
from briefdeck.layout import SlideLayoutEngine

# 1x1 PNG; python-pptx sniffs the format from the bytes, not the file name
PIXEL_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)

FIXED_DAY = date(2025, 3, 14)


@pytest.fixture(autouse=True)
def restore_package_logger() -> Generator[None, None, None]:
    """Undo handler changes the CLI makes to the ``briefdeck`` logger."""
    logger = logging.getLogger("briefdeck")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def asset_dir(temp_dir: Path) -> Path:
    """Asset directory holding every background and the logo."""
    assets = AssetPaths()
    directory = temp_dir / "assets"
    directory.mkdir()
    names = {
        assets.title_background,
        assets.agenda_background,
        assets.thankyou_background,
        assets.logo,
        *assets.transition_pool,
    }
    for name in names:
        (directory / name).write_bytes(PIXEL_PNG)
    return directory


@pytest.fixture
def assets(asset_dir: Path) -> AssetPaths:
    return AssetPaths(directory=asset_dir)


@pytest.fixture
def engine() -> SlideLayoutEngine:
    """Layout engine with a fixed render date."""
    return SlideLayoutEngine(today=FIXED_DAY)


@pytest.fixture
def eight_row_engine() -> SlideLayoutEngine:
    """Row height that leaves room for exactly 8 data rows per table page."""
    return SlideLayoutEngine(layout=LayoutConfig(table_row_height=0.4), today=FIXED_DAY)


@pytest.fixture
def sample_slide_data() -> list[dict]:
    return [
        {"type": "title", "title": "March Compliance Briefing", "subtitle": "Employer benefits update"},
        {"type": "agenda", "title": "Agenda", "items": ["Court ruling on coverage", "  Employer impact", "Q&A"]},
        {"type": "transition", "title": "In the News"},
        {
            "type": "content",
            "title": "Court Ruling on Preventive Coverage",
            "content": ["Background and Timeline", "• The court ruled on March 3", "- Appeal expected"],
            "notes": "<p>Walk through the ruling.</p>",
        },
        {
            "type": "go_deeper",
            "title": "Preventive Coverage: Go Deeper",
            "content": ["• Plans must keep covering services", "◦ Self-funded plans included"],
        },
        {
            "type": "table",
            "title": "Key Dates",
            "headers": ["Date", "Event"],
            "rows": [["March 3", "Ruling issued"], ["June 1", "Guidance expected"]],
        },
        {
            "type": "checklist",
            "title": "Employer Checklist",
            "checklist_heading": "Compliance quick check",
            "content": ["Review plan documents", "Update notices"],
            "checklist_panel_text": "Use this list before renewal.",
            "checklist_items": [{"text": "Review SPD", "checked": True}, {"text": "File Form 5500", "checked": "no"}],
        },
        {
            "type": "textbox",
            "title": "Before and After",
            "boxes": [
                {"header": "Before", "content": "Coverage was optional.", "color": "gray"},
                {"header": "After", "content": "Coverage is required.", "color": "teal"},
            ],
        },
        {
            "type": "qotm",
            "title": "Question of the Month",
            "scenario": ["An employer adds a wellness plan."],
            "rule": ["Incentives are capped."],
            "action": ["Review incentive design."],
        },
        {"type": "transition_alt", "title": "Federal Updates"},
        {"type": "thankyou", "title": "THANK YOU!"},
    ]


@pytest.fixture
def sample_oracle_output(sample_slide_data) -> str:
    """Oracle reply as it usually arrives: fenced JSON."""
    return "```json\n" + json.dumps({"slides": sample_slide_data}) + "\n```"
