"""
Exception taxonomy for the analysis core.

Malformed pattern text is never raised: it is reported as a ParseError value
by the parser and surfaced as a diagnostic.
"""


class GitignoreLSError(Exception):
    """Base class for errors raised by the analysis core."""
    pass


class StaleVersionError(GitignoreLSError):
    """Raised when a change notification is not newer than the session."""

    def __init__(self, uri: str, version: int, current_version: int):
        self.uri = uri
        self.version = version
        self.current_version = current_version
        super().__init__(
            f"Stale change for {uri}: version {version} is not newer than {current_version}"
        )


class UnknownDocumentError(GitignoreLSError):
    """Raised when an operation targets a URI without an open session."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"The document {uri} is not open on the server.")
