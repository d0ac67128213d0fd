from typing import Optional

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from .errors import ParseError

# first non-blank text wins, then the caller's fallback
TITLE_TAGS = ("title", "h1")


def is_html(content_type: Optional[str]) -> bool:
    return "html" in (content_type or "").lower()


def first_text(document: BeautifulSoup, tag: str) -> str:
    el = document.find(tag)
    if el is None:
        return ""
    return el.get_text().strip()


def extract_title(document: BeautifulSoup) -> Optional[str]:
    for tag in TITLE_TAGS:
        text = first_text(document, tag)
        if text:
            return text
    return None


def parse_document(body: bytes) -> BeautifulSoup:
    try:
        return BeautifulSoup(body, "html.parser")
    except (ParserRejectedMarkup, AssertionError, LookupError, ValueError) as e:
        raise ParseError(f"could not parse HTML: {e}") from e


def classify(response, fallback: str) -> str:
    """
    Title for a successful response.

    Non-HTML content keeps `fallback`. For HTML the body is read and parsed;
    reading or parsing failures raise ParseError for the caller to downgrade.
    """
    if not is_html(response.content_type):
        return fallback

    document = parse_document(response.read_body())
    return extract_title(document) or fallback
