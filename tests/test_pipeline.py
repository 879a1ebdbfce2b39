"""
Tests for document intake, preview assembly, output files and end-to-end conversion.
"""

from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest
from docx import Document
from pptx import Presentation

from briefdeck.config import Settings
from briefdeck.docx_source import read_docx_text, read_document_text
from briefdeck.errors import InputError, NoSlidesError
from briefdeck.models import Importance
from briefdeck.pipeline import BriefingConverter
from briefdeck.preview import assemble_preview, clean_slide_markup, template_head
from briefdeck.sink import OutputSink

FIXED_DAY = date(2025, 3, 14)

TEMPLATE = """<html><head><title>Briefing</title>
<style>.slide { background: url('desiredresults/assets/ppt/media/image9.jpg'); }</style>
</head><body><div class="slide">example</div></body></html>"""

SLIDE_HTML = """<div class="slide"><div class="content"><div class="title">March Briefing</div></div></div>
<div class="content-slide"><div class="content-title">Court Ruling</div>
<p class="content-paragraph">The court ruled.</p></div>"""


class FakeOracle:
    """Structuring oracle that replays canned replies."""

    def __init__(self, slide_json: str = "", slide_html: str = SLIDE_HTML):
        self.slide_json = slide_json
        self.slide_html = slide_html
        self.calls = []

    def generate_slide_html(self, document_text, template_html, guidance):
        self.calls.append(("html", document_text, guidance))
        return "```html\n" + self.slide_html + "\n```"

    def extract_slide_json(self, slide_html):
        self.calls.append(("json", slide_html))
        return self.slide_json


@pytest.fixture
def briefing_docx(temp_dir: Path) -> Path:
    doc = Document()
    for text in ("Monthly briefing", "1. Court ruling on mandatory coverage", "Details.", "2. Quick reminder", "Optional tip."):
        doc.add_paragraph(text)
    table = doc.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "Renewal window"
    table.rows[0].cells[1].text = "June 1"
    path = temp_dir / "briefing.docx"
    doc.save(str(path))
    return path


@pytest.fixture
def settings(temp_dir: Path, assets) -> Settings:
    template = temp_dir / "template.html"
    template.write_text(TEMPLATE, encoding="utf-8")
    return Settings(assets=assets, output_dir=temp_dir / "public", template_path=template)


def _sink(settings: Settings, start: int = 1700000000) -> OutputSink:
    return OutputSink(settings.output_dir, clock=lambda: start)


class TestDocxSource:
    """Tests for document text extraction."""

    def test_paragraphs_then_tables(self, briefing_docx: Path):
        text = read_docx_text(briefing_docx)
        assert text.startswith("Monthly briefing\n\n1. Court ruling")
        assert text.endswith("Renewal window | June 1")

    def test_missing_file(self, temp_dir: Path):
        with pytest.raises(InputError):
            read_docx_text(temp_dir / "missing.docx")

    def test_wrong_extension(self, temp_dir: Path):
        path = temp_dir / "notes.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(InputError, match="Only .docx"):
            read_docx_text(path)

    def test_corrupt_docx(self, temp_dir: Path):
        path = temp_dir / "broken.docx"
        path.write_bytes(b"not a zip")
        with pytest.raises(InputError):
            read_docx_text(path)

    def test_plain_text_passthrough(self, temp_dir: Path):
        path = temp_dir / "briefing.txt"
        path.write_text("1. Topic\nBody", encoding="utf-8")
        assert read_document_text(path) == "1. Topic\nBody"


class TestPreview:
    """Tests for preview assembly."""

    def test_clean_slide_markup(self):
        markup = "```html\n1. Title Page: <div>Hi</div>\n```"
        assert clean_slide_markup(markup) == "<div>Hi</div>"

    def test_template_head_rewrites_media(self):
        head = template_head(TEMPLATE)
        assert head.startswith("<head>")
        assert "url('/assets/image9.jpg')" in head
        assert "desiredresults" not in head

    def test_missing_template_gets_bare_head(self):
        assert "<title>Presentation</title>" in template_head("")

    def test_assemble_joins_chunks(self):
        html = assemble_preview(TEMPLATE, ["<div>one</div>", "```\n<div>two</div>\n```"])
        assert html.startswith("<!DOCTYPE html>")
        assert "<body>\n<div>one</div>\n\n<div>two</div>\n</body>" in html


class TestOutputSink:
    """Tests for OutputSink."""

    def test_names_from_timestamp(self, temp_dir: Path):
        sink = OutputSink(temp_dir, clock=lambda: 1.5)
        path = sink.write_preview("<html></html>")
        assert path == temp_dir / "previews" / "presentation_1500.html"
        assert sink.url_for(path) == "/previews/presentation_1500.html"

    def test_collision_gets_suffix(self, temp_dir: Path):
        sink = OutputSink(temp_dir)
        first = sink.write_preview("a", stamp=7)
        second = sink.write_preview("b", stamp=7)
        assert first.name == "presentation_7.html"
        assert second.name == "presentation_7_1.html"
        assert first.read_text(encoding="utf-8") == "a"

    def test_download_path_is_claimed(self, temp_dir: Path):
        sink = OutputSink(temp_dir)
        path = sink.download_path(stamp=3)
        assert path.parent == temp_dir / "downloads"
        assert path.is_file() and path.stat().st_size == 0

    def test_same_millisecond_gets_distinct_paths(self, temp_dir: Path):
        """Two downloads reserved at the same instant never share a file."""
        sink = OutputSink(temp_dir, clock=lambda: 1700000000.0)
        first = sink.download_path()
        second = sink.download_path()
        assert first != second
        assert first.name == "presentation_1700000000000.pptx"
        assert second.name == "presentation_1700000000000_1.pptx"


class TestBriefingConverter:
    """Tests for BriefingConverter."""

    def test_prepare_classifies(self, briefing_docx: Path, settings: Settings):
        converter = BriefingConverter(FakeOracle(), settings, _sink(settings))
        prepared = converter.prepare(briefing_docx)
        assert [c.importance for c in prepared.classifications] == [Importance.CRITICAL, Importance.MINOR]
        assert "CRITICAL ARTICLES" in prepared.guidance

    def test_table_text_joins_last_article(self, briefing_docx: Path, settings: Settings, temp_dir: Path):
        """A deadline in a trailing table lifts the last article from minor to standard."""
        doc = Document(str(briefing_docx))
        doc.tables[0].rows[0].cells[0].text = "Deadline"
        path = temp_dir / "deadline.docx"
        doc.save(str(path))

        prepared = BriefingConverter(FakeOracle(), settings, _sink(settings)).prepare(path)
        assert [c.importance for c in prepared.classifications] == [Importance.CRITICAL, Importance.STANDARD]

    def test_preview_writes_page(self, briefing_docx: Path, settings: Settings):
        oracle = FakeOracle()
        converter = BriefingConverter(oracle, settings, _sink(settings))
        result = converter.preview(briefing_docx)

        assert result.path.is_file()
        assert result.url == f"/previews/presentation_{result.presentation_id}.html"
        assert "url('/assets/image9.jpg')" in result.html
        assert "```" not in result.html
        kind, text, guidance = oracle.calls[0]
        assert kind == "html"
        assert "Court ruling on mandatory coverage" in text
        assert "Court ruling on mandatory coverage" in guidance

    def test_convert_writes_deck(self, settings: Settings, sample_oracle_output: str):
        converter = BriefingConverter(FakeOracle(sample_oracle_output), settings, _sink(settings), today=FIXED_DAY)
        result = converter.convert(SLIDE_HTML, presentation_id=42)

        assert result.path == settings.output_dir / "downloads" / "presentation_42.pptx"
        assert result.url == "/downloads/presentation_42.pptx"
        assert result.slide_count == 11
        assert len(Presentation(str(result.path)).slides) == 11

    def test_convert_falls_back_to_html(self, settings: Settings):
        converter = BriefingConverter(FakeOracle("no json here"), settings, _sink(settings), today=FIXED_DAY)
        result = converter.convert(SLIDE_HTML, presentation_id=1)
        assert result.slide_count == 2

    def test_convert_empty_html(self, settings: Settings):
        converter = BriefingConverter(FakeOracle(), settings, _sink(settings))
        with pytest.raises(InputError, match="No HTML content"):
            converter.convert("   ")

    def test_convert_nothing_recoverable(self, settings: Settings):
        converter = BriefingConverter(FakeOracle("{}"), settings, _sink(settings))
        with pytest.raises(NoSlidesError):
            converter.convert("<p>no slide markers</p>")

    def test_missing_template_is_not_fatal(self, briefing_docx: Path, settings: Settings, temp_dir: Path):
        settings = replace(settings, template_path=temp_dir / "absent.html")
        converter = BriefingConverter(FakeOracle(), settings, _sink(settings))
        assert "<title>Presentation</title>" in converter.preview(briefing_docx).html


class TestPublicApi:
    """Tests for the package-level exports."""

    def test_converter_exported(self):
        import briefdeck

        assert briefdeck.BriefingConverter is BriefingConverter
        assert briefdeck.OutputSink is OutputSink
        assert {"BriefingConverter", "StructuringOracle", "OutputSink"} <= set(briefdeck.__all__)
