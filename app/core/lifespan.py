from contextlib import asynccontextmanager
import logging

from app.core.config import settings
from app.extraction import TextExtractionEngine
from app.services.analysis_service import AnalysisOrchestrator

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app):
    app.state.extraction_engine = TextExtractionEngine(max_pages=settings.pdf_max_pages)
    app.state.analysis_orchestrator = AnalysisOrchestrator.from_settings(settings)
    logger.info(
        "services_ready remote_analysis=%s reduced_retry=%s pdf_max_pages=%s",
        bool(settings.analysis_remote_url),
        settings.analysis_reduced_retry,
        settings.pdf_max_pages,
    )
    yield
