from .engine import TextExtractionEngine, clean_extracted_text, extraction_warning
from .models import (
    ExtractionFailure,
    ExtractionFailureReason,
    ExtractionResult,
    ExtractionSuccess,
    UploadedDocument,
)
from .validation import DocumentKind, validate_document_text

__all__ = [
    "TextExtractionEngine",
    "clean_extracted_text",
    "extraction_warning",
    "ExtractionFailure",
    "ExtractionFailureReason",
    "ExtractionResult",
    "ExtractionSuccess",
    "UploadedDocument",
    "DocumentKind",
    "validate_document_text",
]
