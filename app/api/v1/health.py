from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health", summary="Health Check", description="Check the health status of the application.")
async def health_check(request: Request):
    orchestrator = getattr(request.app.state, "analysis_orchestrator", None)
    remote = "configured" if orchestrator is not None and orchestrator.client is not None else "local_only"
    return {"status": "healthy", "analysis": remote}
