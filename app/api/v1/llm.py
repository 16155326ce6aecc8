import asyncio

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from app.core.rate_limit import rate_limit
from app.schemas.analysis import AnalysisRequest
from app.services.llm_analysis import LLMAnalysisError, run_resume_analysis

router = APIRouter()


@router.post(
    "/llm/analyze-resume",
    summary="LLM Resume Analysis",
    description="Remote analysis contract served in-process; failures use an {error, statusCode} envelope.",
)
@rate_limit()
async def llm_analyze_resume(request: Request, payload: AnalysisRequest):
    _ = request
    try:
        return await asyncio.to_thread(
            run_resume_analysis,
            resume_text=payload.resume_text,
            job_description=payload.job_description,
            cover_letter_text=payload.cover_letter_text,
            company_name=payload.company_name,
            options=payload.options,
        )
    except LLMAnalysisError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc), "statusCode": exc.status_code},
        )
