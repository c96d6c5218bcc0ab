# psd_engine/domain/template_service.py
import asyncio
import logging
import os
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

import psutil

from psd_engine.config.settings import settings
from psd_engine.delivery.schemas.body import AnalysisResult
from psd_engine.delivery.schemas.template import ContainerContext, TransformedPayload
from psd_engine.domain.compositor import composite_payload_to_data_uri
from psd_engine.domain.design_validator import validate_design
from psd_engine.domain.layer_serializer import serialize_layer_tree
from psd_engine.domain.native import NativeDocument
from psd_engine.domain.template_extractor import create_container_context, extract_template_metadata
from psd_engine.infrastructure.io.source_loader import load_source_bytes
from psd_engine.infrastructure.psd.psd_codec import encode_psd_document, parse_psd_bytes

# --- LOGGER ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False

Decoder = Callable[[bytes, bool], NativeDocument]


def _memory_mb() -> Optional[float]:
    try:
        return psutil.Process(os.getpid()).memory_info().rss / 1024 / 1024
    except psutil.Error as mem_error:
        logger.warning(f"Could not get memory info: {mem_error}")
        return None


class TemplateService:
    """
    Async facade over the template core.

    Fetching the source is awaited on the event loop; decoding, rendering and
    re-encoding run in the shared executor so a large document never blocks
    other requests.
    """

    def __init__(self, executor: ThreadPoolExecutor, decoder: Decoder = parse_psd_bytes):
        self.executor = executor
        self.decoder = decoder

    async def _run(self, fn, *args):
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self.executor, fn, *args)

    async def load_document(self, source: str, skip_layer_image_data: bool = False) -> NativeDocument:
        start = time.perf_counter()
        data = await load_source_bytes(source)
        document = await self._run(self.decoder, data, skip_layer_image_data)
        memory_mb = _memory_mb()
        logger.info(
            f"Decoded document {document.width}x{document.height} "
            f"({len(data) / 1024:.1f}KB) in {time.perf_counter() - start:.2f}s"
            + (f", memory {memory_mb:.1f}MB" if memory_mb is not None else "")
        )
        return document

    async def analyze(self, source: str) -> AnalysisResult:
        document = await self.load_document(source, skip_layer_image_data=True)
        template = extract_template_metadata(document)
        report = validate_design(document, template)
        logger.info(
            f"Analysis: {len(template.containers)} container(s), "
            f"{len(report.issues)} issue(s)."
        )
        return AnalysisResult(
            template=template,
            layers=serialize_layer_tree(document),
            validation=report,
        )

    async def container_context(self, source: str, container_name: str) -> Optional[ContainerContext]:
        document = await self.load_document(source, skip_layer_image_data=True)
        return create_container_context(extract_template_metadata(document), container_name)

    async def render_preview(self, source: str, payload: TransformedPayload) -> Optional[str]:
        document = await self.load_document(source)
        start = time.perf_counter()
        preview = await self._run(composite_payload_to_data_uri, payload, document)
        logger.info(f"Preview rendered in {time.perf_counter() - start:.2f}s (available={preview is not None}).")
        return preview

    async def export_document(self, source: str) -> bytes:
        document = await self.load_document(source, skip_layer_image_data=True)
        return await self._run(encode_psd_document, document)
