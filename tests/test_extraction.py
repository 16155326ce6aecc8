import sys
import unittest
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (PROJECT_ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from app.extraction import (  # noqa: E402
    ExtractionFailure,
    ExtractionSuccess,
    TextExtractionEngine,
    UploadedDocument,
    clean_extracted_text,
    extraction_warning,
    validate_document_text,
)
from pdf_helpers import build_pdf  # noqa: E402

RESUME_PAGE = (
    "Jane Doe - Senior Software Engineer\n"
    "jane.doe@example.com | +1 555 010 2000\n"
    "Developed payment APIs in Python serving two million users.\n"
    "Led a team of six engineers delivering a billing platform migration."
)


class TextExtractionEngineTests(unittest.TestCase):
    def setUp(self):
        self.engine = TextExtractionEngine()

    def test_pdf_text_is_extracted_and_normalized(self):
        document = UploadedDocument(content=build_pdf([RESUME_PAGE]), media_type="application/pdf", filename="cv.pdf")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)
        self.assertIn("Senior Software Engineer", result.text)
        self.assertIn("billing platform migration", result.text)
        for token in ("endobj", "endstream", "<<", ">>"):
            self.assertNotIn(token, result.text)
        self.assertNotIn("  ", result.text)

    def test_pages_are_separated_by_blank_line(self):
        document = UploadedDocument(
            content=build_pdf([RESUME_PAGE, "Education: BSc Computer Science, University of Somewhere, 2015."]),
            media_type="application/pdf",
            filename="cv.pdf",
        )

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)
        self.assertIn("\n\nEducation: BSc Computer Science", result.text)

    def test_page_cap_limits_extraction(self):
        engine = TextExtractionEngine(max_pages=1)
        document = UploadedDocument(
            content=build_pdf([RESUME_PAGE, "Second page with Kubernetes certification details."]),
            media_type="application/pdf",
            filename="cv.pdf",
        )

        result = engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)
        self.assertNotIn("Kubernetes", result.text)

    def test_image_only_pdf_is_reported_as_scanned(self):
        document = UploadedDocument(content=build_pdf([""]), media_type="application/pdf", filename="scan.pdf")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertEqual(result.reason, "binary_or_scanned")
        self.assertIn("scanned document", result.detail)
        self.assertIn("image-based PDF", result.detail)

    def test_short_pdf_text_is_reported_as_scanned(self):
        document = UploadedDocument(content=build_pdf(["Jane Doe"]), media_type="application/pdf", filename="cv.pdf")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertEqual(result.reason, "binary_or_scanned")

    def test_bad_page_is_replaced_by_placeholder(self):
        document = UploadedDocument(
            content=build_pdf(["broken", RESUME_PAGE]),
            media_type="application/pdf",
            filename="cv.pdf",
        )
        long_text = RESUME_PAGE.replace("\n", " ")

        with patch.object(TextExtractionEngine, "_page_text", side_effect=[RuntimeError("bad xobject"), long_text]):
            result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)
        self.assertIn("(Page 1 could not be read)", result.text)
        self.assertIn("Senior Software Engineer", result.text)

    def test_corrupt_pdf_is_parse_error(self):
        document = UploadedDocument(content=b"this is not a pdf at all", media_type="application/pdf", filename="cv.pdf")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertIn(result.reason, {"parse_error", "binary_or_scanned"})

    def test_plain_text_is_decoded(self):
        content = "Jane Doe\r\n\r\n\r\n\r\nSenior   Engineer\twith Python".encode("utf-8")
        document = UploadedDocument(content=content, media_type="text/plain; charset=utf-8", filename="cv.txt")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)
        self.assertEqual(result.text, "Jane Doe\n\nSenior Engineer with Python")

    def test_txt_extension_is_accepted_without_media_type(self):
        document = UploadedDocument(content=b"Plain resume text", media_type="application/octet-stream", filename="CV.TXT")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionSuccess)

    def test_pdf_disguised_as_txt_is_binary(self):
        document = UploadedDocument(content=b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>", media_type="text/plain", filename="cv.txt")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertEqual(result.reason, "binary_or_scanned")
        self.assertIn("binary file", result.detail)

    def test_control_bytes_in_txt_are_binary(self):
        document = UploadedDocument(content=b"PK\x03\x04\x00\x00binary", media_type="text/plain", filename="cv.txt")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertEqual(result.reason, "binary_or_scanned")

    def test_unsupported_types_are_rejected(self):
        for media_type, filename in (
            ("application/msword", "cv.doc"),
            ("image/png", "cv.png"),
            ("", "cv"),
        ):
            with self.subTest(media_type=media_type):
                document = UploadedDocument(content=b"data", media_type=media_type, filename=filename)
                result = self.engine.extract_text(document)
                self.assertIsInstance(result, ExtractionFailure)
                self.assertEqual(result.reason, "unsupported_type")

    def test_empty_upload_is_empty_content(self):
        document = UploadedDocument(content=b"", media_type="text/plain", filename="cv.txt")

        result = self.engine.extract_text(document)

        self.assertIsInstance(result, ExtractionFailure)
        self.assertEqual(result.reason, "empty_content")

    def test_clean_extracted_text_strips_pdf_syntax(self):
        raw = "12 0 obj << /Length 44 >> stream BT garbage ET endstream endobj Jane   Doe\x07 see 5 0 R [Resume]"

        cleaned = clean_extracted_text(raw)

        self.assertEqual(cleaned, "Jane Doe see Resume")

    def test_extraction_warning_for_short_text(self):
        self.assertIsNotNone(extraction_warning(ExtractionSuccess(text="short")))
        self.assertIsNone(extraction_warning(ExtractionSuccess(text="x" * 80)))
        failure = ExtractionFailure(reason="unsupported_type", detail="nope")
        self.assertEqual(extraction_warning(failure), "nope")


class DocumentValidationTests(unittest.TestCase):
    def test_short_resume_is_rejected(self):
        self.assertIsNotNone(validate_document_text("Jane Doe, engineer", "resume"))
        self.assertIsNone(validate_document_text("Experienced engineer. " * 12, "resume"))

    def test_extraction_error_text_is_rejected(self):
        text = "Error extracting text from PDF: unexpected end of stream. " * 5
        self.assertIsNotNone(validate_document_text(text, "cover_letter"))

    def test_job_description_page_chrome_is_rejected(self):
        text = "Sign in to continue. Forgot password? " + "Lorem ipsum dolor sit amet. " * 30
        self.assertIsNotNone(validate_document_text(text, "job_description"))

    def test_job_description_with_sections_is_accepted(self):
        text = (
            "About the role\nWe are looking for a backend engineer to join our payments team.\n\n"
            "Requirements\nPython, SQL and experience with cloud platforms."
        )
        self.assertIsNone(validate_document_text(text, "job_description"))


if __name__ == "__main__":
    unittest.main()
