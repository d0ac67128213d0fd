class LinkcheckError(Exception):
    """Base class for linkcheck errors."""


class TransportError(LinkcheckError):
    """The request never produced a response (DNS, refused, timeout, bad URL)."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"{url}: {cause}")
        self.url = url
        self.cause = cause


class ParseError(LinkcheckError):
    """An HTML body could not be read or parsed."""


class SourceError(LinkcheckError):
    """The job source could not be created or opened."""
