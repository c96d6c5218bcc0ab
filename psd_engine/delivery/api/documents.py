# psd_engine/delivery/api/documents.py
from fastapi import APIRouter, Request, Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from fastapi.responses import Response
from psd_engine.delivery.schemas.body import (
    AnalysisResult,
    ContainerContextRequest,
    DocumentSource,
    PreviewRequest,
    PreviewResult,
)
from psd_engine.delivery.schemas.template import ContainerContext
from psd_engine.domain.errors import PsdParseError, SourceReadError
from psd_engine.config.settings import settings
import secrets
import logging
import traceback
import asyncio

router = APIRouter(prefix="/documents")
security = HTTPBasic()
logger = logging.getLogger("uvicorn.error")

def verify_basic_auth(creds: HTTPBasicCredentials = Depends(security)) -> None:
    ok_user = secrets.compare_digest(creds.username, settings.BASIC_AUTH_USERNAME)
    ok_pass = secrets.compare_digest(creds.password, settings.BASIC_AUTH_PASSWORD)
    if not (ok_user and ok_pass):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication credentials",
            headers={"WWW-Authenticate": "Basic"},
        )

def get_service(request: Request):
    service = getattr(request.app.state, "template_service", None)
    if service is None:
        logger.error("Template service not initialized")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service is not ready. Please try again in a moment.",
        )
    return service

async def run_bounded(operation: str, coro):
    """Await a service call under the endpoint timeout, mapping domain errors to HTTP errors."""
    try:
        return await asyncio.wait_for(coro, timeout=settings.ENDPOINT_TIMEOUT_SECONDS)
    except asyncio.TimeoutError:
        logger.error(f"=== {operation} TIMEOUT after {settings.ENDPOINT_TIMEOUT_SECONDS}s ===")
        raise HTTPException(status_code=504, detail="Document processing timed out")
    except PsdParseError as e:
        logger.warning(f"{operation}: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except SourceReadError as e:
        logger.warning(f"{operation}: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"=== {operation} ERROR: {e} ===\n{traceback.format_exc()}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Internal server error.",
        )

@router.post("/analyze", response_model=AnalysisResult, dependencies=[Depends(verify_basic_auth)])
async def analyze_document(body: DocumentSource, service=Depends(get_service)):
    return await run_bounded("ANALYZE", service.analyze(body.source))

@router.post("/container-context", response_model=ContainerContext, dependencies=[Depends(verify_basic_auth)])
async def container_context(body: ContainerContextRequest, service=Depends(get_service)):
    context = await run_bounded(
        "CONTAINER CONTEXT", service.container_context(body.source, body.container_name)
    )
    if context is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Container '{body.container_name}' not found in template.",
        )
    return context

@router.post("/preview", response_model=PreviewResult, dependencies=[Depends(verify_basic_auth)])
async def render_preview(body: PreviewRequest, service=Depends(get_service)):
    preview = await run_bounded("PREVIEW", service.render_preview(body.source, body.payload))
    return PreviewResult(preview=preview)

@router.post("/export", dependencies=[Depends(verify_basic_auth)])
async def export_document(body: DocumentSource, service=Depends(get_service)):
    data = await run_bounded("EXPORT", service.export_document(body.source))
    return Response(
        content=data,
        media_type="application/octet-stream",
        headers={"Content-Disposition": 'attachment; filename="document.psd"'},
    )
