"""Exception hierarchy for briefdeck.

Per-slide anomalies (bad colors, unknown types, overflow) are recovered in
place and never raised. Only problems that leave a request with nothing to
render, or nowhere to write it, surface as exceptions.
"""


class BriefdeckError(Exception):
    """Base class for all briefdeck errors."""


class InputError(BriefdeckError):
    """The caller supplied unusable input (missing file, wrong type, empty HTML)."""


class NoSlidesError(InputError):
    """Neither the JSON path nor the HTML fallback produced any slides."""


class SlideDataError(BriefdeckError):
    """Oracle output could not be read as a slide list."""


class OutputError(BriefdeckError):
    """A preview or deck could not be written to disk."""

    def __init__(self, message: str, path=None):
        super().__init__(message)
        self.path = path
