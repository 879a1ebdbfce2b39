"""Slide descriptions and article classification records."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import ClassVar


class SlideType(str, Enum):
    TITLE = "title"
    AGENDA = "agenda"
    CONTENT = "content"
    GO_DEEPER = "go_deeper"
    TABLE = "table"
    CHECKLIST = "checklist"
    TEXTBOX = "textbox"
    TRANSITION = "transition"
    TRANSITION_ALT = "transition_alt"
    QOTM = "qotm"
    THANKYOU = "thankyou"


# Slide types that frame the deck rather than carry article content.
STRUCTURAL_TYPES = frozenset(
    {
        SlideType.TITLE,
        SlideType.AGENDA,
        SlideType.TRANSITION,
        SlideType.TRANSITION_ALT,
        SlideType.THANKYOU,
    }
)

# Slide types that accept speaker notes, in the order notes blocks are consumed.
NOTES_TYPES = frozenset(
    {
        SlideType.CONTENT,
        SlideType.GO_DEEPER,
        SlideType.TABLE,
        SlideType.CHECKLIST,
        SlideType.QOTM,
        SlideType.TEXTBOX,
    }
)


@dataclass
class Slide:
    """Fields shared by every slide variant."""

    kind: ClassVar[SlideType | None] = None

    title: str = ""
    notes: str = ""

    @property
    def type(self) -> str:
        return self.kind.value if self.kind else ""

    @property
    def is_structural(self) -> bool:
        return self.kind in STRUCTURAL_TYPES

    def to_dict(self) -> dict:
        data = {"type": self.type}
        data.update(asdict(self))
        return data


@dataclass
class TitleSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.TITLE

    briefing_header: str = ""
    subtitle: str = ""


@dataclass
class AgendaSlide(Slide):
    """Agenda entries; a leading two-space indent marks a sub-item."""

    kind: ClassVar[SlideType] = SlideType.AGENDA

    items: list[str] = field(default_factory=list)


@dataclass
class ContentSlide(Slide):
    """Body lines: "• " bullets, "-" sub-bullets, anything else a section heading."""

    kind: ClassVar[SlideType] = SlideType.CONTENT

    content: list[str] = field(default_factory=list)
    bullets: bool = True


@dataclass
class GoDeeperSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.GO_DEEPER

    content: list[str] = field(default_factory=list)


@dataclass
class TableSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.TABLE

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


@dataclass
class ChecklistItem:
    text: str = ""
    checked: bool = False


@dataclass
class ChecklistSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.CHECKLIST

    content: list[str] = field(default_factory=list)
    checklist_heading: str = ""
    checklist_panel_text: str = ""
    checklist_items: list[ChecklistItem] = field(default_factory=list)


@dataclass
class TextBoxSpec:
    header: str = ""
    content: str = ""
    color: str = "gray"  # "gray" or "teal"


@dataclass
class TextboxSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.TEXTBOX

    boxes: list[TextBoxSpec] = field(default_factory=list)


@dataclass
class TransitionSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.TRANSITION


@dataclass
class TransitionAltSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.TRANSITION_ALT


@dataclass
class QotmSlide(Slide):
    """Question of the month: scenario, rule and action bullet lists."""

    kind: ClassVar[SlideType] = SlideType.QOTM

    scenario: list[str] = field(default_factory=list)
    rule: list[str] = field(default_factory=list)
    action: list[str] = field(default_factory=list)


@dataclass
class ThankYouSlide(Slide):
    kind: ClassVar[SlideType] = SlideType.THANKYOU


@dataclass
class UnsupportedSlide(Slide):
    """A slide whose type tag is not recognised. The layout engine skips it."""

    raw_type: str = ""
    data: dict = field(default_factory=dict)

    @property
    def type(self) -> str:
        return self.raw_type


SLIDE_CLASSES: dict[SlideType, type[Slide]] = {
    cls.kind: cls
    for cls in (
        TitleSlide,
        AgendaSlide,
        ContentSlide,
        GoDeeperSlide,
        TableSlide,
        ChecklistSlide,
        TextboxSlide,
        TransitionSlide,
        TransitionAltSlide,
        QotmSlide,
        ThankYouSlide,
    )
}


# ── Article classification ────────────────────────────────────────────────────


class Importance(str, Enum):
    CRITICAL = "critical"
    STANDARD = "standard"
    MINOR = "minor"

    @property
    def slide_budget(self) -> int:
        """Dedicated slides allowed for an article of this tier."""
        return {"critical": 2, "standard": 1, "minor": 0}[self.value]


@dataclass
class Article:
    title: str
    content: str = ""
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class Classification:
    title: str
    importance: Importance

    @property
    def slide_count(self) -> int:
        return self.importance.slide_budget

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "importance": self.importance.value,
            "slide_count": self.slide_count,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Classification":
        return cls(
            title=str(data.get("title", "")),
            importance=Importance(str(data["importance"]).lower()),
        )
