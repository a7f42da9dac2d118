"""Exception hierarchy for papershelf."""

from __future__ import annotations


class PaperShelfError(Exception):
    """Base class for all papershelf errors."""


class InvalidIdentifierError(PaperShelfError, ValueError):
    def __init__(self, value: str = ""):
        self.value = value
        msg = f"Invalid identifier format: {value!r}" if value else "Invalid identifier format"
        super().__init__(msg)


class InvalidSourceError(PaperShelfError, ValueError):
    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Invalid source {value!r} (expected one of: arxiv, iacr, doi)")


class InvalidUrlError(PaperShelfError, ValueError):
    pass


class NotFoundError(PaperShelfError):
    """The remote service has no record for the identifier."""


class ApiError(PaperShelfError):
    """The remote service answered, but not with usable paper metadata."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"API error: {message}")


class NetworkError(PaperShelfError):
    """Transport-level failure (DNS, TLS, timeout, reset)."""


class DuplicatePaperError(PaperShelfError):
    """The store already holds a paper with this (source, identifier) pair."""

    def __init__(self, source, identifier: str):
        self.source = source
        self.identifier = identifier
        super().__init__(f"Paper already stored: {source} {identifier}")
