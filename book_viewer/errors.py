"""Exception hierarchy shared by the transport, decoder and scripts."""

from __future__ import annotations


class BookViewerError(Exception):
    """Base class for all Book Viewer errors."""


class ServiceConnectionError(BookViewerError, ConnectionError):
    """The shared connection to the matching service failed or is not open."""


class ParseError(BookViewerError, ValueError):
    """Response body is not valid JSON."""


class SchemaError(ParseError):
    """Response body is valid JSON but does not have the expected shape."""
