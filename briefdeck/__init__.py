"""Branded slide decks from legal and compliance briefing documents."""

from briefdeck.enforcer import enforce
from briefdeck.errors import BriefdeckError, InputError, NoSlidesError, OutputError, SlideDataError
from briefdeck.layout import SlideLayoutEngine, render
from briefdeck.normalizer import normalize
from briefdeck.pipeline import BriefingConverter, ConversionResult, PreviewResult, StructuringOracle
from briefdeck.pptx_writer import DeckWriter, write_deck
from briefdeck.sink import OutputSink

__version__ = "0.1.0"

__all__ = [
    "BriefdeckError",
    "BriefingConverter",
    "ConversionResult",
    "DeckWriter",
    "InputError",
    "NoSlidesError",
    "OutputError",
    "OutputSink",
    "PreviewResult",
    "SlideDataError",
    "SlideLayoutEngine",
    "StructuringOracle",
    "enforce",
    "normalize",
    "render",
    "write_deck",
]
