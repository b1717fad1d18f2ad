import asyncio
import base64
import pytest
import requests
from clausescope.ingest.loader import decode_pdf_source, parse_document
from clausescope.ingest.pdf_loader import extract_pdf, is_pdf
from clausescope.ingest.text_parser import normalize_text, parse_text, sanitize_input, validate_text
from clausescope.ingest.url_loader import fetch_url, html_to_text, is_valid_url
from clausescope.utils.exception import FetchError, ParseError, TooShort, ValidationError

LONG = "These terms govern your use of the service and form a binding agreement with us."

HTML = f"""
<html><head><title>Terms of Service</title><script>var x = 1;</script></head>
<body><nav>Home | About</nav>
<main><h1>Terms</h1><p>{LONG}</p><p>{LONG}</p></main>
<footer>Copyright</footer></body></html>
"""


class FakeResponse:
    def __init__(self, text, status=200):
        self.text = text
        self.status_code = status
        self.encoding = "utf-8"
        self.apparent_encoding = "utf-8"

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, headers=None, timeout=None):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


def test_normalize_text_collapses_and_keeps_paragraphs():
    raw = "Clause   one\twith  spaces   that is long enough.\r\n\r\n\r\n\r\n  Clause two follows here.  "
    out = normalize_text(raw)
    assert out == "Clause one with spaces that is long enough.\n\nClause two follows here."


def test_normalize_text_too_short():
    with pytest.raises(TooShort):
        normalize_text("   tiny   ")


def test_validate_and_sanitize():
    with pytest.raises(ValidationError):
        validate_text("")
    with pytest.raises(ValidationError):
        validate_text("x" * 60, max_chars=50)
    assert sanitize_input("<b>Hi</b> javascript:alert(1)") == "bHi/b alert(1)"


def test_parse_text_metadata():
    doc = parse_text(LONG)
    assert doc.type == "text" and doc.source == "direct-input"
    assert doc.word_count == len(LONG.split())
    assert doc.as_dict()["metadata"]["title"] == "Direct Text Input"


def test_extract_pdf_rejects_non_pdf():
    assert not is_pdf(b"hello world")
    with pytest.raises(ParseError):
        extract_pdf(b"definitely not a pdf file")


def test_extract_pdf_rejects_broken_pdf():
    with pytest.raises(ParseError):
        extract_pdf(b"%PDF-1.4\nthis is not really a pdf body")


def test_html_to_text_prefers_main_content():
    title, text = html_to_text(HTML)
    assert title == "Terms of Service"
    assert LONG in text
    assert "Home | About" not in text and "var x" not in text and "Copyright" not in text


def test_fetch_url_success():
    session = FakeSession(FakeResponse(HTML))
    doc = fetch_url("https://example.com/terms", timeout=3, session=session)
    assert doc.type == "url" and doc.title == "Terms of Service"
    assert session.calls == [("https://example.com/terms", 3)]
    assert doc.word_count > 20


def test_fetch_url_failures():
    with pytest.raises(FetchError):
        fetch_url("https://example.com", session=FakeSession(error=requests.ConnectionError("down")))
    with pytest.raises(FetchError):
        fetch_url("https://example.com", session=FakeSession(FakeResponse("", status=404)))
    with pytest.raises(TooShort):
        fetch_url("https://example.com", session=FakeSession(FakeResponse("<html><body>hi</body></html>")))


def test_url_validation():
    assert is_valid_url("https://example.com/tos")
    assert not is_valid_url("ftp://example.com")
    assert not is_valid_url("not a url")


def test_parse_document_routing():
    doc = asyncio.run(parse_document(LONG, "text"))
    assert doc.text == LONG
    with pytest.raises(ValidationError):
        asyncio.run(parse_document("not a url", "url"))
    with pytest.raises(ValidationError):
        asyncio.run(parse_document(LONG, "docx"))
    with pytest.raises(ValidationError):
        decode_pdf_source("***not base64***")
    encoded = base64.b64encode(b"not a pdf").decode()
    with pytest.raises(ParseError):
        asyncio.run(parse_document(encoded, "pdf"))


def test_fetch_url_closes_its_own_session(monkeypatch):
    opened = []

    class ClosingSession(FakeSession):
        closed = False

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True

    def make_session():
        session = ClosingSession(FakeResponse(HTML))
        opened.append(session)
        return session

    monkeypatch.setattr(requests, "Session", make_session)
    doc = fetch_url("https://example.com/terms")
    assert doc.title == "Terms of Service"
    assert len(opened) == 1 and opened[0].closed
