"""Exception types raised by the COI intake system.

Only malformed input raises. A field that could not be determined is
``None`` and an unresolved employee is ``MatchType.NONE``; neither is
an error.
"""

import re


class COIIntakeError(Exception):
    """Base class for COI intake errors."""


class ExtractionFailure(COIIntakeError):
    """Upstream text extraction failed (corrupt or encrypted document).

    Not recoverable here; propagated to the caller.
    """


class UnsupportedInput(COIIntakeError):
    """The document carries no extractable text (for example, image-only)."""


# U+FFFD and C0 controls other than tab/newline/carriage return.
_GARBAGE_RE = re.compile(r"[\ufffd\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def ensure_text(text: object, sentinel: str) -> str:
    """Validate that ``text`` is usable extracted text.

    Args:
        text: Value handed over by the text extraction step.
        sentinel: Marker the extraction step sends for image-only input.

    Returns:
        The text unchanged.

    Raises:
        ExtractionFailure: If ``text`` is not a string or consists only of
            replacement and control characters.
        UnsupportedInput: If ``text`` is the sentinel or blank.
    """
    if not isinstance(text, str):
        raise ExtractionFailure(
            f"Expected extracted text, got {type(text).__name__}"
        )
    if text == sentinel or not text.strip():
        raise UnsupportedInput("Document has no extractable text")
    if not _GARBAGE_RE.sub("", text).strip():
        raise ExtractionFailure("Extracted text is unreadable")
    return text
