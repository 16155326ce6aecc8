import asyncio

from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status

from app.core.config import settings
from app.extraction import TextExtractionEngine, UploadedDocument, extraction_warning
from app.extraction.models import ExtractionSuccess
from app.schemas.analysis import ExtractTextResponse

router = APIRouter()

READ_CHUNK_BYTES = 64 * 1024


async def _read_upload(file: UploadFile, max_bytes: int) -> bytes:
    chunks: list[bytes] = []
    total = 0
    while True:
        chunk = await file.read(READ_CHUNK_BYTES)
        if not chunk:
            break
        total += len(chunk)
        if total > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"File too large. Maximum size is {max_bytes // (1024 * 1024)} MB.",
            )
        chunks.append(chunk)
    return b"".join(chunks)


def _engine(request: Request) -> TextExtractionEngine:
    return request.app.state.extraction_engine


@router.post(
    "/extract-text",
    response_model=ExtractTextResponse,
    summary="Extract Text",
    description="Extract plain text from an uploaded PDF or .txt file. Extraction failures are returned as data.",
)
async def extract_text(request: Request, file: UploadFile = File(...)):
    content = await _read_upload(file, settings.max_upload_bytes)
    document = UploadedDocument(
        content=content,
        media_type=file.content_type or "",
        filename=file.filename or "",
    )
    result = await asyncio.to_thread(_engine(request).extract_text, document)
    return ExtractTextResponse(
        filename=document.filename,
        media_type=document.media_type,
        characters=len(result.text) if isinstance(result, ExtractionSuccess) else 0,
        result=result,
        warning=extraction_warning(result),
    )
