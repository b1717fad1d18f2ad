from __future__ import annotations
from urllib.parse import urlparse
import requests
from bs4 import BeautifulSoup
from clausescope.utils.exception import FetchError, TooShort
from clausescope.utils.logger import get_logger
from clausescope.utils.types import ParsedDocument
from clausescope.ingest.text_parser import normalize_text, word_count

logger = get_logger(__name__)

BROWSER_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
}
STRIP_TAGS = ["script", "style", "nav", "header", "footer"]
CONTENT_SELECTORS = ["main", "article", "[role=main]", ".content", "#content", ".terms", ".legal"]


def is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def html_to_text(html: str) -> tuple[str, str]:
    """Return (title, visible text) using the largest known content container."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIP_TAGS):
        tag.decompose()
    title = soup.title.get_text(strip=True) if soup.title else ""
    text = ""
    for selector in CONTENT_SELECTORS:
        for node in soup.select(selector):
            content = node.get_text(separator="\n")
            if len(content) > len(text):
                text = content
    if len(text.strip()) < 100 and soup.body is not None:
        text = soup.body.get_text(separator="\n")
    return title or "Untitled Document", text


def fetch_url(url: str, timeout: float = 10.0, session: requests.Session | None = None) -> ParsedDocument:
    """Fetch a terms page and reduce it to normalized text.

    Network, HTTP status and timeout failures raise FetchError; a page with
    under 50 characters of visible text raises TooShort.
    """
    try:
        if session is None:
            with requests.Session() as http:
                resp = http.get(url, headers=BROWSER_HEADERS, timeout=timeout)
        else:
            resp = session.get(url, headers=BROWSER_HEADERS, timeout=timeout)
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Failed to fetch URL: {e}") from e
    resp.encoding = resp.encoding or resp.apparent_encoding or "utf-8"
    title, raw = html_to_text(resp.text)
    try:
        text = normalize_text(raw)
    except TooShort as e:
        raise TooShort("Insufficient text content found at URL") from e
    logger.info("Fetched %s (%d chars)", url, len(text))
    return ParsedDocument(text=text, source=url, type="url", title=title, word_count=word_count(text))
