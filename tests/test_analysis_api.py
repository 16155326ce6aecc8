import importlib
import os
import sys
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

# Keep API tests deterministic and fast by default.
os.environ.setdefault("RATE_LIMIT_ENABLED", "0")
os.environ["LLM_ANALYSIS_ENABLED"] = "0"

PROJECT_ROOT = Path(__file__).resolve().parents[1]
TESTS_DIR = Path(__file__).resolve().parent
for path in (PROJECT_ROOT, TESTS_DIR):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from slowapi import Limiter, _rate_limit_exceeded_handler  # noqa: E402
from slowapi.errors import RateLimitExceeded  # noqa: E402
from slowapi.util import get_remote_address  # noqa: E402

import app.api.v1.analysis as analysis_routes  # noqa: E402
from app.extraction import TextExtractionEngine  # noqa: E402
from app.main import app  # noqa: E402
from app.services.analysis_service import AnalysisOrchestrator  # noqa: E402
from pdf_helpers import build_pdf  # noqa: E402

RESUME = (
    "Jane Doe\n"
    "jane@example.com | +1 555 010 2000\n\n"
    "EXPERIENCE\n"
    "• Developed payment APIs in Python serving 2 million users\n"
    "• Led a team of six engineers delivering a billing platform migration\n"
    "• Built a reporting pipeline for finance with Docker\n\n"
    "EDUCATION\n"
    "BSc Computer Science"
)
JOB = (
    "About the role\n"
    "We are looking for a backend engineer to join our payments team.\n\n"
    "Requirements\n"
    "Python, Docker and Kubernetes experience. Familiarity with AWS is a plus."
)


class AnalysisApiTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        os.environ["LLM_ANALYSIS_ENABLED"] = "0"
        cls.client = TestClient(app)
        app.state.extraction_engine = TextExtractionEngine()
        app.state.analysis_orchestrator = AnalysisOrchestrator()

    def test_lifespan_wires_services(self):
        with TestClient(app) as client:
            response = client.get("/v1/health")
            self.assertIsInstance(app.state.extraction_engine, TextExtractionEngine)
            self.assertIsInstance(app.state.analysis_orchestrator, AnalysisOrchestrator)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "healthy")
        self.assertIn(response.json()["analysis"], {"configured", "local_only"})
        app.state.analysis_orchestrator = AnalysisOrchestrator()

    def test_health_reports_local_only_without_remote_client(self):
        response = self.client.get("/v1/health")

        self.assertEqual(response.json(), {"status": "healthy", "analysis": "local_only"})

    def test_extract_text_from_pdf(self):
        pdf = build_pdf([RESUME.replace("•", "-")])

        response = self.client.post("/v1/extract-text", files={"file": ("cv.pdf", pdf, "application/pdf")})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["result"]["status"], "success")
        self.assertEqual(body["mediaType"], "application/pdf")
        self.assertEqual(body["characters"], len(body["result"]["text"]))
        self.assertIn("payment APIs", body["result"]["text"])
        self.assertIsNone(body["warning"])

    def test_extraction_failures_are_data(self):
        cases = (
            (("cv.txt", b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>", "text/plain"), "binary_or_scanned"),
            (("cv.docx", b"PK\x03\x04 word document", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"), "unsupported_type"),
            (("cv.txt", b"", "text/plain"), "empty_content"),
        )
        for upload, reason in cases:
            with self.subTest(reason=reason):
                response = self.client.post("/v1/extract-text", files={"file": upload})

                self.assertEqual(response.status_code, 200)
                body = response.json()
                self.assertEqual(body["result"]["status"], "failure")
                self.assertEqual(body["result"]["reason"], reason)
                self.assertEqual(body["characters"], 0)
                self.assertEqual(body["warning"], body["result"]["detail"])

    def test_oversized_upload_is_rejected(self):
        with patch("app.api.v1.extraction.settings", SimpleNamespace(max_upload_bytes=10)):
            response = self.client.post(
                "/v1/extract-text",
                files={"file": ("cv.txt", b"x" * 64, "text/plain")},
            )

        self.assertEqual(response.status_code, 413)

    def test_analyze_returns_camel_case_report(self):
        response = self.client.post(
            "/v1/analyze",
            json={"resumeText": RESUME, "jobDescription": JOB, "requestToken": "req-42"},
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["source"], "local_fallback")
        self.assertEqual(body["requestToken"], "req-42")
        self.assertGreaterEqual(len(body["starAnalysis"]), 3)
        self.assertIn("alignmentScore", body)
        self.assertIn("missingSkills", body)
        self.assertIsNone(body["coverLetterAnalysis"])
        self.assertEqual(body["starAnalysis"][0]["original"], "Developed payment APIs in Python serving 2 million users")

    def test_analyze_with_cover_letter(self):
        letter = (
            "Dear Hiring Manager,\n\nI am excited to apply for the backend engineer role at Acme. "
            "I built Python payment services used by 2 million customers."
        )

        response = self.client.post(
            "/v1/analyze",
            json={"resumeText": RESUME, "jobDescription": JOB, "coverLetterText": letter, "companyName": "Acme"},
        )

        self.assertEqual(response.status_code, 200)
        analysis = response.json()["coverLetterAnalysis"]
        self.assertIn("tone", analysis)
        self.assertEqual(len(analysis["companyInsights"]), 3)

    def test_analyze_rejects_unusable_resume(self):
        response = self.client.post("/v1/analyze", json={"resumeText": "Jane Doe", "jobDescription": JOB})

        self.assertEqual(response.status_code, 400)
        self.assertIn("Could not properly read your resume", response.json()["detail"])

    def test_analyze_rejects_page_chrome_job_description(self):
        job = "Sign in to apply. Forgot your password? " + "Posted today. " * 10

        response = self.client.post("/v1/analyze", json={"resumeText": RESUME, "jobDescription": job})

        self.assertEqual(response.status_code, 400)

    def test_analyze_requires_fields(self):
        response = self.client.post("/v1/analyze", json={"resumeText": RESUME})

        self.assertEqual(response.status_code, 422)

    def test_improved_resume(self):
        response = self.client.post(
            "/v1/analyze/improved-resume",
            json={
                "resumeText": "EXPERIENCE\n• Managed a team of 5 engineers",
                "alignmentScore": 70,
                "starAnalysis": [
                    {
                        "original": "Managed a team of 5 engineers",
                        "improved": "Led a team of 5 engineers, cutting release time by 30%",
                        "feedback": "Added a metric",
                    }
                ],
            },
        )

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["improvedText"], "EXPERIENCE\n• Led a team of 5 engineers, cutting release time by 30%")
        self.assertEqual(body["updatedAlignmentScore"], 71)

    def test_llm_endpoint_uses_error_envelope(self):
        response = self.client.post("/v1/llm/analyze-resume", json={"resumeText": RESUME, "jobDescription": JOB})

        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "OpenAI API key is not configured", "statusCode": 500})

    def test_llm_endpoint_rejects_blank_inputs(self):
        response = self.client.post("/v1/llm/analyze-resume", json={"resumeText": " ", "jobDescription": JOB})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["statusCode"], 400)


class RateLimitTests(unittest.TestCase):
    def test_improved_resume_is_rate_limited(self):
        test_limiter = Limiter(key_func=get_remote_address)
        limited = SimpleNamespace(rate_limit_enabled=True, rate_limit="1/minute")
        try:
            with patch("app.core.rate_limit.settings", limited), patch("app.core.rate_limit.limiter", test_limiter):
                routes = importlib.reload(analysis_routes)
            limited_app = FastAPI()
            limited_app.state.limiter = test_limiter
            limited_app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
            limited_app.include_router(routes.router, prefix="/v1")
            client = TestClient(limited_app)
            body = {"resumeText": "EXPERIENCE\n• Managed a team", "alignmentScore": 70, "starAnalysis": []}

            first = client.post("/v1/analyze/improved-resume", json=body)
            second = client.post("/v1/analyze/improved-resume", json=body)
        finally:
            importlib.reload(analysis_routes)

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 429)


if __name__ == "__main__":
    unittest.main()
