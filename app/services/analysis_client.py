from __future__ import annotations

import logging
from typing import Any, Literal

import httpx

logger = logging.getLogger(__name__)

RemoteFailureKind = Literal["timeout", "http_error", "malformed_response"]

TIMEOUT_MESSAGE = "Analysis took too long to complete. Please try again."


class RemoteAnalysisError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        kind: RemoteFailureKind = "http_error",
        status_code: int | None = None,
        fallback_analysis: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.status_code = status_code
        self.fallback_analysis = fallback_analysis


def _envelope_error(payload: Any) -> str | None:
    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, str) and error.strip():
            return error.strip()
    return None


class RemoteAnalysisClient:
    """HTTP client for the remote resume analysis service.

    Every failure surfaces as ``RemoteAnalysisError`` so the caller can fall
    back to local analysis.
    """

    def __init__(
        self,
        url: str,
        *,
        api_key: str | None = None,
        timeout_s: float = 45.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.timeout_s = timeout_s
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def analyze(self, body: dict[str, Any]) -> dict[str, Any]:
        try:
            with httpx.Client(timeout=self.timeout_s, transport=self._transport) as client:
                response = client.post(self.url, json=body, headers=self._headers())
        except httpx.TimeoutException as exc:
            raise RemoteAnalysisError(TIMEOUT_MESSAGE, kind="timeout") from exc
        except httpx.HTTPError as exc:
            raise RemoteAnalysisError(f"Network error while contacting analysis service: {exc}") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if response.status_code >= 400:
            message = _envelope_error(payload) or response.text[:300] or "Analysis service error"
            fallback = payload.get("fallbackAnalysis") if isinstance(payload, dict) else None
            raise RemoteAnalysisError(
                f"API error: {response.status_code} {message}",
                status_code=response.status_code,
                fallback_analysis=fallback if isinstance(fallback, dict) else None,
            )

        if not isinstance(payload, dict):
            raise RemoteAnalysisError(
                "Analysis service returned a response that is not a JSON object.",
                kind="malformed_response",
                status_code=response.status_code,
            )

        error = _envelope_error(payload)
        if error and "alignmentScore" not in payload:
            raise RemoteAnalysisError(
                f"API error: {error}",
                status_code=response.status_code,
                fallback_analysis=payload.get("fallbackAnalysis") if isinstance(payload.get("fallbackAnalysis"), dict) else None,
            )
        return payload
