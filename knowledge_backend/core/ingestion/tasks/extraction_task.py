"""
Text extraction task.

Sniffs the format of a stored object and converts PDF, HTML or plain
text bytes into a single text string. A PDF the parser rejects falls
back to a lossy UTF-8 decode and is reported as degraded.

Dependencies: pypdf, beautifulsoup4
System role: Extraction stage of the indexing pipeline
"""

import io
import logging
import re
from typing import Literal

from bs4 import BeautifulSoup
from pypdf import PdfReader

from knowledge_backend.core.exceptions import ExtractionDegraded

logger = logging.getLogger(__name__)

Kind = Literal["pdf", "html", "text", "unknown"]

HTML_EXTENSIONS = (".html", ".htm")
TEXT_EXTENSIONS = (".md", ".txt", ".json", ".csv")
DROPPED_TAGS = ["script", "style", "noscript"]
_WHITESPACE = re.compile(r"\s+")


def sniff_kind(key: str | None, content_type: str | None = None) -> Kind:
    """
    Classify an object by key suffix and content type.

    Args:
        key: Object key or URL path
        content_type: Optional Content-Type header

    Returns:
        Kind: "pdf", "html", "text" or "unknown"
    """
    k = (key or "").lower()
    ct = (content_type or "").lower()
    if "pdf" in ct or k.endswith(".pdf"):
        return "pdf"
    if k.endswith(HTML_EXTENSIONS):
        return "html"
    if k.endswith(TEXT_EXTENSIONS):
        return "text"
    return "unknown"


class TextExtractor:
    """Convert raw object bytes to text."""

    def extract(self, data: bytes, kind: Kind) -> str:
        text, _ = self.extract_with_status(data, kind)
        return text

    def extract_with_status(self, data: bytes, kind: Kind) -> tuple[str, bool]:
        """
        Extract text and report whether the degraded fallback was used.

        Args:
            data: Raw object bytes
            kind: Result of sniff_kind

        Returns:
            tuple[str, bool]: (text, degraded); text is "" when nothing
            is extractable
        """
        if not data:
            return "", False

        degraded = False
        if kind == "pdf":
            try:
                text = self._extract_pdf(data)
            except Exception as e:
                warning = ExtractionDegraded(f"PDF parse failed, using raw decode: {e}", kind="pdf")
                logger.warning(
                    f"{__name__}:extract - {warning}",
                    extra={"error_type": type(e).__name__, "size": len(data)},
                )
                text = self._decode(data).strip()
                degraded = True
        elif kind == "html":
            text = self._extract_html(self._decode(data))
        else:
            text = self._decode(data).strip()

        return text.replace("\x00", " ").strip(), degraded

    @staticmethod
    def _decode(data: bytes) -> str:
        return data.decode("utf-8", errors="replace")

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
        return "\n".join(pages).strip()

    @staticmethod
    def _extract_html(html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(DROPPED_TAGS):
            tag.decompose()
        root = soup.body or soup
        return _WHITESPACE.sub(" ", root.get_text(" ")).strip()
