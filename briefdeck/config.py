"""Brand, asset, layout and classifier configuration.

Every component takes its configuration as an argument; the defaults below
reproduce the BCS monthly briefing template.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# ── Canvas ────────────────────────────────────────────────────────────────────
SLIDE_WIDTH = 10.0  # inches
SLIDE_HEIGHT = 5.625  # inches (16:9)

DISCLAIMER = (
    "The material presented here is for general educational purposes only and "
    "is subject to change and law, rules, and regulations. It does not provide "
    "legal or tax opinions or advice."
)


@dataclass(frozen=True)
class Theme:
    """Brand palette (6-digit hex, no '#') and typeface."""

    brand: str = "28295D"
    teal: str = "A8D5D5"
    gray: str = "E8E8E8"
    text: str = "333333"
    page_background: str = "F5F5F5"
    check_green: str = "7CB342"
    unchecked: str = "999999"
    white: str = "FFFFFF"
    font: str = "Lato"
    brand_name: str = "BCS"


@dataclass(frozen=True)
class AssetPaths:
    """Background and logo images, resolved against ``directory``."""

    directory: Path = Path("assets")
    title_background: str = "image9.jpg"
    agenda_background: str = "image7.jpg"
    thankyou_background: str = "image10.jpg"
    logo: str = "image8.png"
    transition_pool: tuple[str, ...] = (
        "image1.jpg",
        "image5.jpg",
        "image7.jpg",
        "image9.jpg",
    )

    def path(self, name: str) -> Path:
        return Path(self.directory) / name

    def transition_background(self, slide_index: int) -> str:
        """Pick a transition background by slide index, rotating through the pool."""
        return self.transition_pool[slide_index % len(self.transition_pool)]


@dataclass(frozen=True)
class LayoutConfig:
    """Safe zones, caps and sizing limits used by the layout engine."""

    max_y: float = 5.0
    content_start_y: float = 1.5
    go_deeper_start_y: float = 2.0
    table_available_width: float = 9.2
    table_available_height: float = 3.8
    table_min_row_height: float = 0.35
    table_max_row_height: float = 0.6
    table_long_cell_row_height: float = 0.45
    # Forces a fixed row height (and therefore a fixed rows-per-page count)
    table_row_height: float | None = None
    textbox_char_cap: int = 300
    checklist_char_cap: int = 500
    checklist_max_items: int = 8
    agenda_max_items: int = 15
    qotm_bullets_per_section: int = 3


@dataclass(frozen=True)
class ClassifierConfig:
    """Weighted regex signal sets for article importance scoring."""

    critical_patterns: tuple[str, ...] = (
        r"applies to\s+all\s+(employers|groups)",
        r"mandatory|required|must comply",
        r"deadline.*\d{4}",
        r"effective\s+date",
        r"litigation|lawsuit|court\s+(order|ruling)",
        r"penalty|fine|enforcement",
        r"new\s+(federal|state)\s+(law|regulation|rule)",
        r"emergency|urgent",
        r"action\s+required",
        r"compliance\s+deadline",
    )
    standard_patterns: tuple[str, ...] = (
        r"applies to",
        r"employer\s+(action|obligations|responsibilities)",
        r"guidance|clarification|update",
        r"reporting\s+requirement",
        r"notice\s+requirement",
        r"action\s+items",
        r"compliance\s+quick\s+check",
        r"takeaways",
    )
    minor_patterns: tuple[str, ...] = (
        r"reminder|note",
        r"background|context",
        r"fyi|for\s+your\s+information",
        r"optional|voluntary",
        r"best\s+practice",
        r"tip",
    )
    critical_weight: int = 2
    standard_weight: int = 1
    minor_weight: int = 1
    long_article_words: int = 500
    short_article_words: int = 100


@dataclass(frozen=True)
class Settings:
    """Process-level settings, usually read from the environment by the CLI."""

    theme: Theme = field(default_factory=Theme)
    assets: AssetPaths = field(default_factory=AssetPaths)
    layout: LayoutConfig = field(default_factory=LayoutConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    output_dir: Path = Path("public")
    template_path: Path = Path("template.html")
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            assets=AssetPaths(directory=Path(env.get("BRIEFDECK_ASSETS_DIR", "assets"))),
            output_dir=Path(env.get("BRIEFDECK_OUTPUT_DIR", "public")),
            template_path=Path(env.get("BRIEFDECK_TEMPLATE", "template.html")),
            log_level=env.get("BRIEFDECK_LOG_LEVEL", "INFO").upper(),
        )
