"""
Tests for the slide layout engine.
"""

from datetime import date

import pytest

from briefdeck.canvas import Rect, TextBox
from briefdeck.config import DISCLAIMER, SLIDE_HEIGHT, SLIDE_WIDTH, AssetPaths, LayoutConfig, Theme
from briefdeck.layout import SlideLayoutEngine, is_section_heading, render
from briefdeck.metrics import estimate_text_height
from briefdeck.models import (
    AgendaSlide,
    ChecklistItem,
    ChecklistSlide,
    ContentSlide,
    GoDeeperSlide,
    QotmSlide,
    SlideType,
    TableSlide,
    TextBoxSpec,
    TextboxSlide,
    ThankYouSlide,
    TitleSlide,
    TransitionAltSlide,
    TransitionSlide,
    UnsupportedSlide,
)
from briefdeck.normalizer import slide_from_dict
from briefdeck.verify import verify_deck

FIXED_DAY = date(2025, 3, 14)

EPS = 1e-6
LONG_ITEM = "• Employers must review every plan document, summary of benefits and notice for the new coverage mandate"


def _table(rows: int) -> TableSlide:
    return TableSlide(
        title="Key Dates",
        notes="Table notes",
        headers=["A", "B"],
        rows=[[f"a{i}", f"b{i}"] for i in range(rows)],
    )


class TestCanvasBounds:
    """Every element of every variant stays on the 10 x 5.625 canvas."""

    def test_sample_deck_in_bounds(self, engine, sample_slide_data):
        deck = engine.render([slide_from_dict(d) for d in sample_slide_data])
        assert len(deck) == len(sample_slide_data)
        for canvas in deck:
            assert (canvas.width, canvas.height) == (SLIDE_WIDTH, SLIDE_HEIGHT)
            for element in canvas.elements:
                assert element.left >= -EPS and element.top >= -EPS
                assert element.right <= SLIDE_WIDTH + EPS
                assert element.bottom <= SLIDE_HEIGHT + EPS

    def test_sample_deck_verifies_clean(self, engine, sample_slide_data):
        """No overflow, out-of-bounds shape or text overlap in a typical deck."""
        deck = engine.render([slide_from_dict(d) for d in sample_slide_data])
        report = verify_deck(deck)
        assert report.is_clean, [s for s in report.slides if s.has_issues]

    def test_colors_are_hex(self, engine, sample_slide_data):
        """Every fill, border and text color is resolved to six hex digits."""
        deck = engine.render([slide_from_dict(d) for d in sample_slide_data])
        for canvas in deck:
            for element in canvas.elements:
                if isinstance(element, TextBox):
                    assert len(element.color) == 6
                if isinstance(element, Rect) and element.fill:
                    assert len(element.fill) == 6


class TestDispatch:
    """Tests for slide type dispatch."""

    def test_unknown_type_skipped(self, engine):
        """Unrecognised slides produce no canvas and a warning."""
        deck = engine.render([UnsupportedSlide(raw_type="statistics"), ThankYouSlide()])
        assert [c.slide_type for c in deck] == ["thankyou"]
        assert any("statistics" in w for w in deck.warnings)

    def test_render_failure_is_contained(self, engine, monkeypatch):
        """An exception in one renderer does not abort the deck."""

        def boom(*args):
            raise RuntimeError("bad slide")

        monkeypatch.setitem(engine._renderers, SlideType.CONTENT, boom)
        deck = engine.render([ContentSlide(title="X"), ThankYouSlide()])
        assert [c.slide_type for c in deck] == ["thankyou"]
        assert len(deck.warnings) == 1

    def test_page_labels(self, engine):
        """Page numbers follow the input position; the title slide has none."""
        deck = engine.render([TitleSlide(title="T"), ContentSlide(title="C", content=["• a"]), ThankYouSlide()])
        assert [c.page_label for c in deck] == ["", "2", "3"]
        assert deck.canvases[0].by_role("page_number") == []
        assert deck.canvases[1].text_of("page_number") == ["2"]

    def test_every_renderer_documented(self, engine):
        assert all(renderer.__doc__ for renderer in engine._renderers.values())

    def test_module_render(self):
        """The module-level render builds a fresh engine."""
        deck = render([TransitionSlide(title="News")], today=FIXED_DAY)
        assert deck.canvases[0].title == "NEWS"


class TestTitleSlide:
    """Tests for the title slide."""

    def test_default_briefing_header(self, engine):
        canvas = engine.render([TitleSlide(title="Deck")]).canvases[0]
        assert canvas.text_of("briefing_header") == ["BCS Monthly Briefing: March 14, 2025"]

    def test_layers(self, engine):
        """Background, translucent overlay and logo are placed."""
        canvas = engine.render([TitleSlide(title="Deck", subtitle="Sub")]).canvases[0]
        background = canvas.by_role("background")[0]
        assert background.name == AssetPaths().title_background
        overlay = canvas.by_role("overlay")[0]
        assert overlay.fill == Theme().brand and 0 < overlay.transparency < 100
        assert canvas.text_of("subtitle") == ["Sub"]
        assert len(canvas.by_role("logo")) == 1


class TestContentOverflow:
    """Tests for content and go-deeper overflow handling."""

    def test_prefix_kept_in_order(self, engine):
        """Only the items that fit are drawn, in order, and none straddles max Y."""
        items = [f"{LONG_ITEM} {i}" for i in range(30)]
        deck = engine.render([ContentSlide(title="Long", content=items)])
        canvas = deck.canvases[0]
        bodies = [e for e in canvas.texts if e.role == "body"]

        assert 0 < len(bodies) < len(items)
        assert [b.text for b in bodies] == [i[2:] for i in items[: len(bodies)]]
        assert all(b.bottom <= LayoutConfig().max_y + EPS for b in bodies)
        assert any("dropped" in w for w in deck.warnings)

    def test_go_deeper_prefix(self, engine):
        items = [f"{LONG_ITEM} {i}" for i in range(30)]
        canvas = engine.render([GoDeeperSlide(title="Deep", content=items)]).canvases[0]
        bodies = [e for e in canvas.texts if e.role == "body"]
        assert 0 < len(bodies) < len(items)
        assert bodies[0].top == pytest.approx(LayoutConfig().go_deeper_start_y)
        assert all(b.bottom <= LayoutConfig().max_y + EPS for b in bodies)
        assert canvas.text_of("banner_label") == ["Go Deeper"]

    def test_short_list_fully_drawn(self, engine):
        deck = engine.render([ContentSlide(title="Short", content=["• One", "• Two"])])
        assert deck.canvases[0].text_of("body") == ["One", "Two"]
        assert deck.warnings == []

    def test_section_heading_and_sub_bullets(self, engine):
        """Headings are centered without a bullet; sub-bullets are indented."""
        canvas = engine.render(
            [ContentSlide(title="C", content=["Background and Timeline", "• Main point", "- Sub point"])]
        ).canvases[0]
        heading = canvas.by_role("heading")[0]
        assert heading.text == "Background and Timeline"
        assert heading.bold and heading.align == "center"
        main, sub = [e for e in canvas.texts if e.role == "body"]
        assert sub.left > main.left
        assert len(canvas.by_role("bullet")) == 2

    def test_bullets_off(self, engine):
        canvas = engine.render([ContentSlide(title="C", content=["• One"], bullets=False)]).canvases[0]
        assert canvas.by_role("bullet") == []

    def test_is_section_heading(self):
        assert is_section_heading("What changed for employers")
        assert not is_section_heading("• What changed")


class TestTablePagination:
    """Tests for table layout and pagination."""

    def test_twenty_rows_eight_per_page(self, eight_row_engine):
        """20 rows at 8 per page give three pages of 8/8/4 with repeated headers."""
        deck = eight_row_engine.render([_table(20)])
        assert len(deck) == 3
        assert [c.title for c in deck] == ["Key Dates (1/3)", "Key Dates (2/3)", "Key Dates (3/3)"]
        assert [len(c.text_of("cell_text")) // 2 for c in deck] == [8, 8, 4]
        for canvas in deck:
            assert canvas.text_of("header_text") == ["A", "B"]

    def test_rows_keep_order(self, eight_row_engine):
        deck = eight_row_engine.render([_table(20)])
        first_column = [t for c in deck for t in c.text_of("cell_text") if t.startswith("a")]
        assert first_column == [f"a{i}" for i in range(20)]

    def test_notes_on_first_page_only(self, eight_row_engine):
        deck = eight_row_engine.render([_table(20)])
        assert [c.notes for c in deck] == ["Table notes", "", ""]
        assert [c.page_label for c in deck] == ["1", "1-2", "1-3"]

    def test_small_table_single_page(self, engine):
        deck = engine.render([_table(3)])
        assert len(deck) == 1
        assert deck.canvases[0].title == "Key Dates"

    def test_row_fills_alternate(self, engine):
        canvas = engine.render([_table(3)]).canvases[0]
        theme = Theme()
        header_fills = {r.fill for r in canvas.by_role("header_cell")}
        cell_fills = [r.fill for r in canvas.by_role("cell")]
        assert header_fills == {theme.brand}
        assert cell_fills == [theme.teal] * 2 + [theme.gray] * 2 + [theme.teal] * 2

    def test_column_widths_proportional(self, engine):
        slide = TableSlide(headers=["Id", "Description"], rows=[["1", "x" * 38]])
        widths = engine.column_widths(slide)
        assert sum(widths) == pytest.approx(LayoutConfig().table_available_width)
        assert widths[1] == pytest.approx(widths[0] * 19)

    def test_row_height_bounds(self, engine):
        cfg = LayoutConfig()
        assert engine.table_row_height(_table(1)) == cfg.table_max_row_height
        assert engine.table_row_height(_table(40)) == cfg.table_min_row_height
        long_cells = TableSlide(headers=["A"], rows=[["y" * 60]] * 40)
        assert engine.table_row_height(long_cells) == cfg.table_long_cell_row_height

    def test_empty_table_skipped(self, engine):
        deck = engine.render([TableSlide(title="Empty", headers=["A"], rows=[])])
        assert len(deck) == 0
        assert deck.warnings


class TestOtherVariants:
    """Tests for agenda, checklist, textbox, transition, qotm and thank-you slides."""

    def test_agenda_tiers_and_centering(self, engine):
        items = [f"Item {i}" for i in range(14)]
        canvas = engine.render([AgendaSlide(items=items)]).canvases[0]
        texts = [e for e in canvas.texts if e.role == "agenda_item"]
        assert len(texts) == 14
        assert max(t.font_size for t in texts) <= 12
        first, last = texts[0], texts[-1]
        top_gap = first.top
        bottom_gap = SLIDE_HEIGHT - (last.top + (last.top - texts[-2].top))
        assert top_gap == pytest.approx(bottom_gap)
        assert {c.color for c in canvas.by_role("check")} == {Theme().check_green}

    def test_agenda_cap(self, engine):
        deck = engine.render([AgendaSlide(items=[f"Item {i}" for i in range(20)])])
        assert len(deck.canvases[0].by_role("agenda_item")) == LayoutConfig().agenda_max_items
        assert deck.warnings

    def test_checklist(self, engine):
        items = [ChecklistItem(f"Task {i}", checked=i % 2 == 0) for i in range(10)]
        slide = ChecklistSlide(title="Checklist", content=["1) Review plans"], checklist_items=items)
        deck = engine.render([slide])
        canvas = deck.canvases[0]
        boxes = canvas.by_role("checkbox")
        assert len(boxes) == 8
        assert boxes[0].text == "✓" and boxes[0].color == Theme().check_green
        assert boxes[1].text == "☐" and boxes[1].color == Theme().unchecked
        assert canvas.background == Theme().brand
        assert canvas.text_of("body") == ["• Review plans"]

    def test_textbox_two_boxes_and_cap(self, engine):
        boxes = [TextBoxSpec("One", "z " * 400, "teal"), TextBoxSpec("Two", "short"), TextBoxSpec("Three", "x")]
        deck = engine.render([TextboxSlide(title="Boxes", boxes=boxes)])
        canvas = deck.canvases[0]
        assert canvas.text_of("box_header_text") == ["One", "Two"]
        first, second = canvas.text_of("box_text")
        assert first.endswith("...") and len(first) <= LayoutConfig().textbox_char_cap + 3
        assert second == "short"
        assert [r.fill for r in canvas.by_role("box_body")] == [Theme().teal, Theme().gray]

    @pytest.mark.parametrize("index", range(6))
    def test_transition_background_rotates(self, engine, index):
        slides = [ThankYouSlide()] * index + [TransitionSlide(title="News")]
        canvas = engine.render(slides).canvases[-1]
        pool = AssetPaths().transition_pool
        assert canvas.by_role("background")[0].name == pool[index % len(pool)]

    def test_transition_variants(self, engine):
        standard, alternate = engine.render([TransitionSlide(title="News"), TransitionAltSlide(title="Updates")])
        assert standard.by_role("frame")[0].fill == Theme().brand
        frame = alternate.by_role("frame")[0]
        assert frame.fill is None and frame.border == Theme().white
        assert alternate.by_role("title")[0].align == "center"
        assert standard.title == "NEWS"

    def test_qotm_limits_and_fit(self, engine):
        bullets = [f"Bullet {i} with enough words to fill a line" for i in range(5)]
        canvas = engine.render([QotmSlide(scenario=bullets, rule=bullets, action=bullets)]).canvases[0]
        assert canvas.text_of("banner_label") == ["Scenario", "What the rule says", "What employers should do"]
        bodies = [e for e in canvas.texts if e.role == "body"]
        assert len(bodies) == 9
        assert all(b.bottom <= LayoutConfig().max_y + EPS for b in bodies)

    @pytest.mark.parametrize("per_section", [1, 2, 3])
    def test_qotm_verifies_clean(self, engine, per_section):
        """Bullet glyphs, banners and bodies all fit their boxes at every size tier."""
        bullets = [f"Point {i}" for i in range(per_section)]
        deck = engine.render([QotmSlide(scenario=bullets, rule=bullets, action=bullets)])
        report = verify_deck(deck)
        assert report.is_clean, report.slides[0].overflows
        canvas = deck.canvases[0]
        assert all(e.bottom <= LayoutConfig().max_y + EPS for e in canvas.texts if e.role in ("bullet", "body"))

    def test_bullet_glyph_boxes_hold_their_glyph(self, engine):
        slides = [
            ContentSlide(title="C", content=["• Main", "- Sub"]),
            QotmSlide(scenario=["a"], rule=["b"], action=["c"]),
        ]
        for canvas in engine.render(slides):
            glyphs = canvas.by_role("bullet")
            assert glyphs
            for glyph in glyphs:
                assert estimate_text_height(glyph.text, glyph.font_size, glyph.width) <= glyph.height + EPS

    def test_textbox_missing_fields_get_placeholders(self, engine):
        canvas = engine.render([TextboxSlide(title="Boxes", boxes=[TextBoxSpec()])]).canvases[0]
        assert canvas.text_of("box_header_text") == ["Header Text"]
        assert canvas.text_of("box_text") == ["Content text goes here..."]

    def test_thankyou_disclaimer_invariant(self, engine):
        """The disclaimer is the fixed literal whatever the slide says."""
        canvas = engine.render([ThankYouSlide(title="Something else", notes="ignored")]).canvases[0]
        assert canvas.text_of("disclaimer") == [DISCLAIMER]
        assert canvas.text_of("title") == ["THANK YOU!"]
        assert canvas.text_of("subtitle") == ["Q&A"]

    def test_invalid_theme_color_falls_back(self):
        engine = SlideLayoutEngine(theme=Theme(brand="not-a-color"), today=FIXED_DAY)
        canvas = engine.render([ContentSlide(title="C", content=["• a"])]).canvases[0]
        assert canvas.by_role("header_bar")[0].fill == Theme().text
