"""
End-to-end briefing conversion.

``BriefingConverter`` wires the pieces together for one request:

    document --> prepare() --> text + classifications
             --> preview() --> oracle slide HTML --> preview file
             --> convert() --> oracle slide JSON --> normalize --> enforce
                           --> render --> .pptx file

The structuring oracle (the LLM) is injected; nothing here talks to a model
directly. Each call works on its own slide list and output path, so
independent requests can run side by side.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Optional, Protocol, Union

from briefdeck.classifier import build_classification_guidance, classify_document
from briefdeck.config import Settings
from briefdeck.docx_source import read_docx_text
from briefdeck.enforcer import enforce
from briefdeck.errors import InputError
from briefdeck.layout import SlideLayoutEngine
from briefdeck.models import Classification
from briefdeck.normalizer import normalize
from briefdeck.pptx_writer import DeckWriter
from briefdeck.preview import assemble_preview
from briefdeck.sink import OutputSink

logger = logging.getLogger(__name__)


class StructuringOracle(Protocol):
    """Best-effort text structuring service.

    ``generate_slide_html`` turns document text into template-style slide
    markup; ``extract_slide_json`` turns that markup into the slide JSON the
    normalizer reads. Either may return malformed output.
    """

    def generate_slide_html(self, document_text: str, template_html: str, guidance: str) -> str:
        ...

    def extract_slide_json(self, slide_html: str) -> str:
        ...


@dataclass
class PreparedDocument:
    text: str
    classifications: list[Classification]
    guidance: str


@dataclass
class PreviewResult:
    html: str
    path: Path
    url: str
    presentation_id: int
    classifications: list[Classification] = field(default_factory=list)


@dataclass
class ConversionResult:
    path: Path
    url: str
    slide_count: int
    warnings: list[str] = field(default_factory=list)


class BriefingConverter:
    def __init__(
        self,
        oracle: StructuringOracle,
        settings: Optional[Settings] = None,
        sink: Optional[OutputSink] = None,
        today: Optional[date] = None,
    ):
        self.oracle = oracle
        self.settings = settings or Settings()
        self.sink = sink or OutputSink(self.settings.output_dir)
        self.today = today

    def load_template(self) -> str:
        path = Path(self.settings.template_path)
        if not path.is_file():
            logger.warning("Template %s not found, preview will use a bare <head>", path)
            return ""
        return path.read_text(encoding="utf-8")

    def prepare(self, document: Union[str, Path]) -> PreparedDocument:
        """Extract text from a .docx and classify its articles."""
        text = read_docx_text(document)
        if not text.strip():
            raise InputError(f"{Path(document).name} contains no text")
        classifications = classify_document(text, self.settings.classifier)
        return PreparedDocument(text, classifications, build_classification_guidance(classifications))

    def preview(self, document: Union[str, Path]) -> PreviewResult:
        """Generate slide HTML for *document* and write it as a preview page."""
        prepared = self.prepare(document)
        template = self.load_template()
        markup = self.oracle.generate_slide_html(prepared.text, template, prepared.guidance)
        html = assemble_preview(template, markup)

        stamp = self.sink.timestamp()
        path = self.sink.write_preview(html, stamp)
        return PreviewResult(html, path, self.sink.url_for(path), stamp, prepared.classifications)

    def convert(
        self,
        slide_html: str,
        classifications: Optional[list[Classification]] = None,
        presentation_id: Optional[int] = None,
    ) -> ConversionResult:
        """Structure *slide_html* into slides and write the deck.

        Raises ``InputError`` for empty HTML and ``NoSlidesError`` when no
        slide can be recovered at all.
        """
        if not slide_html or not slide_html.strip():
            raise InputError("No HTML content provided")

        raw = self.oracle.extract_slide_json(slide_html)
        slides = normalize(raw, slide_html)
        if classifications:
            slides = enforce(slides, classifications)

        engine = SlideLayoutEngine(self.settings.theme, self.settings.assets, self.settings.layout, self.today)
        deck = engine.render(slides)

        writer = DeckWriter(self.settings.assets, self.settings.theme)
        writer.build(deck)
        path = writer.save(self.sink.download_path(presentation_id))
        deck.warnings.extend(writer.warnings)

        logger.info("Converted %d slides into %s", len(deck), path)
        return ConversionResult(path, self.sink.url_for(path), len(deck), list(deck.warnings))
