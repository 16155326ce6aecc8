from __future__ import annotations

import codecs
import logging
import re
from io import BytesIO
from typing import Any

from pypdf import PdfReader

from .models import ExtractionFailure, ExtractionResult, ExtractionSuccess, UploadedDocument

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
TEXT_MEDIA_TYPE = "text/plain"

UNSUPPORTED_TYPE_MESSAGE = (
    "Unsupported file type '{label}'. Please upload a text-based PDF or a plain text (.txt) file."
)
SCANNED_PDF_MESSAGE = (
    "This looks like a scanned document or image-based PDF, so no readable text could be "
    "extracted. Please upload a text-based PDF, a Word export saved as PDF, or a .txt file."
)
BINARY_TEXT_MESSAGE = (
    "The uploaded file appears to be a binary file rather than plain text. "
    "Please upload a text-based PDF or a .txt file."
)
EMPTY_CONTENT_MESSAGE = "The uploaded file is empty. Please choose a file that contains text."
PARSE_ERROR_MESSAGE = "Error extracting text from PDF: {error}"
PAGE_PLACEHOLDER = "(Page {page} could not be read)"
LOW_TEXT_WARNING = (
    "Warning: Very little text could be extracted from your file. "
    "Use a text-based file for best results."
)

_STREAM_BODY_RE = re.compile(r"\bstream\b.*?\bendstream\b", re.DOTALL)
_DICTIONARY_RE = re.compile(r"<<.*?>>", re.DOTALL)
_OBJECT_HEADER_RE = re.compile(r"\b\d+\s+\d+\s+obj\b")
_OBJECT_REF_RE = re.compile(r"\b\d+\s+\d+\s+R\b")
_SYNTAX_TOKEN_RE = re.compile(r"%PDF-\d\.\d|%%EOF|\b(?:endobj|endstream|stream|startxref|xref|trailer)\b")
_STRUCTURAL_BRACKETS_RE = re.compile(r"<<|>>|[\[\]<>{}]")
_CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ufffd]")
_HSPACE_RE = re.compile(r"[ \t\f\v\u00a0]+")
_BLANK_LINES_RE = re.compile(r"\n{3,}")
_BINARY_MARKER_RE = re.compile(r"%PDF-|\bendobj\b|\bendstream\b|\bxref\b")
_NON_PRINTABLE_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f\ufffd]")


def normalize_whitespace(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = [_HSPACE_RE.sub(" ", line).strip() for line in text.split("\n")]
    return _BLANK_LINES_RE.sub("\n\n", "\n".join(lines)).strip()


def clean_extracted_text(text: str) -> str:
    """Remove PDF syntax residue and control bytes from extracted page text."""
    cleaned = _STREAM_BODY_RE.sub(" ", text or "")
    cleaned = _DICTIONARY_RE.sub(" ", cleaned)
    cleaned = _OBJECT_HEADER_RE.sub(" ", cleaned)
    cleaned = _OBJECT_REF_RE.sub(" ", cleaned)
    cleaned = _SYNTAX_TOKEN_RE.sub(" ", cleaned)
    cleaned = _STRUCTURAL_BRACKETS_RE.sub(" ", cleaned)
    cleaned = _CONTROL_CHARS_RE.sub("", cleaned)
    return normalize_whitespace(cleaned)


def _decode_text(content: bytes) -> str:
    if content.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return content.decode("utf-16", errors="replace")
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def looks_binary(text: str, sniff_chars: int = 200) -> bool:
    head = text[:sniff_chars]
    if _BINARY_MARKER_RE.search(head):
        return True
    return bool(_NON_PRINTABLE_RE.search(head))


class TextExtractionEngine:
    """Turns uploaded PDF or plain-text documents into normalized text.

    Instances hold configuration only, so one engine can be shared by
    concurrent requests. Failures are returned as ``ExtractionFailure`` values
    rather than raised.
    """

    def __init__(
        self,
        *,
        max_pages: int = 50,
        min_text_chars: int = 100,
        binary_sniff_chars: int = 200,
    ) -> None:
        self.max_pages = max(1, max_pages)
        self.min_text_chars = min_text_chars
        self.binary_sniff_chars = binary_sniff_chars

    def extract_text(self, document: UploadedDocument) -> ExtractionResult:
        media_type = document.media_type
        if media_type == PDF_MEDIA_TYPE:
            handler = self._extract_pdf
        elif media_type == TEXT_MEDIA_TYPE or document.extension == "txt":
            handler = self._extract_plain_text
        else:
            label = media_type or (f".{document.extension}" if document.extension else "unknown")
            logger.info("extraction_unsupported_type file=%s media_type=%s", document.filename, media_type)
            return ExtractionFailure(
                reason="unsupported_type",
                detail=UNSUPPORTED_TYPE_MESSAGE.format(label=label),
            )

        if not document.content:
            return ExtractionFailure(reason="empty_content", detail=EMPTY_CONTENT_MESSAGE)

        result = handler(document)
        if isinstance(result, ExtractionFailure):
            logger.info(
                "extraction_failed file=%s reason=%s bytes=%s",
                document.filename,
                result.reason,
                len(document.content),
            )
        else:
            logger.info("extraction_succeeded file=%s chars=%s", document.filename, len(result.text))
        return result

    def _extract_plain_text(self, document: UploadedDocument) -> ExtractionResult:
        text = _decode_text(document.content)
        if looks_binary(text, self.binary_sniff_chars):
            return ExtractionFailure(reason="binary_or_scanned", detail=BINARY_TEXT_MESSAGE)
        normalized = normalize_whitespace(text)
        if not normalized:
            return ExtractionFailure(reason="empty_content", detail=EMPTY_CONTENT_MESSAGE)
        return ExtractionSuccess(text=normalized)

    def _extract_pdf(self, document: UploadedDocument) -> ExtractionResult:
        try:
            reader = PdfReader(BytesIO(document.content))
            page_count = len(reader.pages)
        except Exception as exc:  # noqa: BLE001 - any parser failure is reported as data
            logger.warning("pdf_open_failed file=%s: %s", document.filename, exc)
            return ExtractionFailure(reason="parse_error", detail=PARSE_ERROR_MESSAGE.format(error=exc))

        if page_count > self.max_pages:
            logger.info("pdf_page_cap file=%s pages=%s cap=%s", document.filename, page_count, self.max_pages)

        page_texts: list[str] = []
        any_page_content = False
        for index in range(min(page_count, self.max_pages)):
            try:
                page_text = self._page_text(reader.pages[index])
            except Exception as exc:  # noqa: BLE001 - one bad page must not abort the document
                logger.warning("pdf_page_failed file=%s page=%s: %s", document.filename, index + 1, exc)
                page_texts.append(PAGE_PLACEHOLDER.format(page=index + 1))
                continue
            if page_text.strip():
                any_page_content = True
            page_texts.append(page_text)

        cleaned = clean_extracted_text("\n\n".join(page_texts))
        if not any_page_content or len(cleaned) < self.min_text_chars:
            return ExtractionFailure(reason="binary_or_scanned", detail=SCANNED_PDF_MESSAGE)
        return ExtractionSuccess(text=cleaned)

    @staticmethod
    def _page_text(page: Any) -> str:
        runs: list[str] = []

        def collect(text: str, *_args: Any) -> None:
            value = (text or "").strip()
            if value:
                runs.append(value)

        extracted = page.extract_text(visitor_text=collect) or ""
        if runs:
            return " ".join(runs)
        return " ".join(extracted.split())


def extraction_warning(result: ExtractionResult) -> str | None:
    if isinstance(result, ExtractionFailure):
        return result.detail
    if len(result.text.strip()) < 50:
        return LOW_TEXT_WARNING
    return None
