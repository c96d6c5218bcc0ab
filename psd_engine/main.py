# psd_engine/main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from concurrent.futures import ThreadPoolExecutor
import threading
import logging
import os

from psd_engine.config.settings import settings
from psd_engine.delivery.api.documents import router
from psd_engine.domain.template_service import TemplateService

logging.getLogger("psd_tools").setLevel(logging.WARNING)
logger = logging.getLogger("uvicorn.error")

# --- Lazy service bootstrap state ---
_service_lock = threading.Lock()
_service_ready = False

def _ensure_service(app: FastAPI) -> None:
    global _service_ready
    with _service_lock:
        if _service_ready:
            return
        logger.info("Initializing TemplateService (lazy-init)...")
        app.state.template_service = TemplateService(executor=app.state.executor)
        _service_ready = True
        logger.info("Service initialization complete.")

@asynccontextmanager
async def lifespan(app: FastAPI):
    max_workers = min(settings.MAX_WORKERS, os.cpu_count() or 1)
    app.state.executor = ThreadPoolExecutor(max_workers=max_workers)
    logger.info(f"'{settings.PROJECT_NAME}' started (mode: {settings.ENVIRONMENT}).")
    logger.info(f"Shared ThreadPoolExecutor created with {max_workers} workers.")
    yield
    global _service_ready
    with _service_lock:
        # the service holds the executor that is about to be shut down
        app.state.template_service = None
        _service_ready = False
    logger.info("Shutting down ThreadPoolExecutor...")
    app.state.executor.shutdown(wait=True)
    logger.info("Service stopped.")

app = FastAPI(
    title="PSD Template Engine",
    description="Template geometry extraction, layout validation and transformed preview rendering for layered PSD documents",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if settings.ENVIRONMENT != "production" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT != "production" else None,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Lazy-load only for API routes
@app.middleware("http")
async def lazy_boot(request: Request, call_next):
    if request.url.path.startswith(settings.API_V1_STR) and getattr(request.app.state, "template_service", None) is None:
        _ensure_service(request.app)
    return await call_next(request)

app.include_router(router, prefix=settings.API_V1_STR)

@app.get("/")
async def root():
    return {"message": "PSD Template Engine", "version": "1.0.0", "status": "ok"}

@app.get("/health")
async def health_check():
    return {"status": "ok", "service": "PSD Template Engine 1.0", "service_ready": _service_ready}
