"""Turn uploaded resume files into plain text."""

import io
import logging

import pdfplumber

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = (".pdf", ".txt", ".md")


class UnsupportedDocumentError(ValueError):
    """The file type is not one we can read."""


def extract_pdf_text(pdf_bytes: bytes) -> str:
    """Extract all text from a PDF file."""
    with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
        pages = [page.extract_text() or "" for page in pdf.pages]
    return "\n".join(pages).strip()


def decode_text(raw: bytes) -> str:
    """Decode a plain-text resume, UTF-8 first with a GBK fallback."""
    for encoding in ("utf-8-sig", "gbk"):
        try:
            return raw.decode(encoding).strip()
        except UnicodeDecodeError:
            continue
    logger.warning("Resume text is neither UTF-8 nor GBK, decoding with replacement")
    return raw.decode("utf-8", errors="replace").strip()


def extract_text(content: bytes, filename: str) -> str:
    name = filename.lower()
    if name.endswith(".pdf"):
        return extract_pdf_text(content)
    if name.endswith((".txt", ".md")):
        return decode_text(content)
    raise UnsupportedDocumentError(f"Unsupported file type: {filename}")
