import asyncio

from fastapi import APIRouter, HTTPException, Request, status

from app.core.rate_limit import rate_limit
from app.extraction import validate_document_text
from app.features.improved_resume import build_improved_resume
from app.schemas.analysis import AnalysisRequest, AnalysisResult, ImprovedResume, ImprovedResumeRequest
from app.services.analysis_service import AnalysisOrchestrator

router = APIRouter()


def _orchestrator(request: Request) -> AnalysisOrchestrator:
    return request.app.state.analysis_orchestrator


def _validate_inputs(payload: AnalysisRequest) -> None:
    checks = [(payload.resume_text, "resume"), (payload.job_description, "job_description")]
    if payload.cover_letter_text and payload.cover_letter_text.strip():
        checks.append((payload.cover_letter_text, "cover_letter"))
    for text, kind in checks:
        error = validate_document_text(text, kind)
        if error:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error)


@router.post(
    "/analyze",
    response_model=AnalysisResult,
    summary="Analyze Resume",
    description="Score a resume against a job description; falls back to local heuristics when the remote service fails.",
)
@rate_limit()
async def analyze(request: Request, payload: AnalysisRequest):
    _validate_inputs(payload)
    cover_letter = payload.cover_letter_text if payload.cover_letter_text and payload.cover_letter_text.strip() else None
    return await asyncio.to_thread(
        _orchestrator(request).analyze,
        payload.resume_text,
        payload.job_description,
        cover_letter,
        company_name=payload.company_name,
        options=payload.options,
        request_token=payload.request_token,
    )


@router.post(
    "/analyze/improved-resume",
    response_model=ImprovedResume,
    summary="Improved Resume",
    description="Apply STAR rewrites to the resume text and estimate the updated alignment score.",
)
@rate_limit()
async def improved_resume(request: Request, payload: ImprovedResumeRequest):
    return build_improved_resume(payload.resume_text, payload.star_analysis, payload.alignment_score)
