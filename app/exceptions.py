"""Error taxonomy for the extraction pipeline.

Only :class:`URLValidationError` ever reaches a caller of
:func:`app.services.pipeline.run_batch`.  Fetch and parse errors are turned
into per-URL ``PageError`` entries, and JSON-LD / XPath errors are absorbed
even earlier so that the rest of the document is still extracted.
"""

from typing import List


class PageMetaError(Exception):
    """Base class for every pipeline error."""


class URLValidationError(PageMetaError):
    """One or more input lines are not plausible URLs.  Blocks the whole batch."""

    def __init__(self, invalid_urls: List[str]) -> None:
        self.invalid_urls = list(invalid_urls)
        super().__init__(f"These URLs are not valid: {', '.join(self.invalid_urls)}")


class NetworkError(PageMetaError):
    """The transport failed before a response was received."""

    def __init__(self, url: str, cause: str) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Network error fetching {url}: {cause}")


class FetchError(PageMetaError):
    """The server answered with a non-2xx status."""

    def __init__(self, url: str, status: int, reason: str) -> None:
        self.url = url
        self.status = status
        self.reason = reason
        super().__init__(f"Error {status}: {reason}")


class ParseError(PageMetaError):
    """The response body could not be interpreted as HTML."""


class SchemaParseError(PageMetaError):
    """A single ``application/ld+json`` block is not valid JSON."""


class XPathError(PageMetaError):
    """A speakable XPath expression failed to compile or evaluate."""

    def __init__(self, expression: str, cause: str) -> None:
        self.expression = expression
        super().__init__(f"Invalid XPath {expression!r}: {cause}")
