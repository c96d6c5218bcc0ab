# psd_engine/domain/compositor.py
import logging
import math
from dataclasses import dataclass
from typing import Callable, NamedTuple, Optional

from psd_engine.config.settings import settings
from psd_engine.delivery.schemas.template import TransformedLayer, TransformedPayload
from psd_engine.domain.native import NativeDocument
from psd_engine.domain.path_resolver import find_layer_by_path
from psd_engine.infrastructure.raster.surface import PillowSurface, RasterSurface, to_data_uri

# --- LOGGER ---
logger = logging.getLogger(__name__)
if not logger.handlers:
    handler = logging.StreamHandler()
    formatter = logging.Formatter('%(asctime)s [%(levelname)s] [COMPOSITE] %(message)s', '%Y-%m-%d %H:%M:%S')
    handler.setFormatter(formatter)
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False

# --- PLACEHOLDER STYLE ---
PLACEHOLDER_GRADIENT = ((124, 58, 237, 110), (124, 58, 237, 40))
PLACEHOLDER_OUTLINE = (124, 58, 237, 204)
HINT_GRADIENT = ((16, 185, 129, 120), (14, 116, 144, 60))
HINT_OUTLINE = (16, 185, 129, 230)
HINT_LABEL = "AI PREVIEW"

SurfaceFactory = Callable[..., RasterSurface]


class RenderFrame(NamedTuple):
    layer: TransformedLayer
    offset_x: float
    offset_y: float


@dataclass
class RenderStats:
    drawn: int = 0
    placeholders: int = 0
    hidden: int = 0
    culled: int = 0
    missing: int = 0
    failed: int = 0


def is_outside_canvas(layer: TransformedLayer, frame: RenderFrame, surface: RasterSurface) -> bool:
    c = layer.coords
    x = c.x - frame.offset_x
    y = c.y - frame.offset_y
    w, h = c.w, c.h
    if layer.transform.rotation:
        # any rotation stays inside the circle of half the diagonal around the center
        radius = math.hypot(w, h) / 2
        x, y = x + w / 2 - radius, y + h / 2 - radius
        w = h = 2 * radius
    return x + w < 0 or y + h < 0 or x > surface.width or y > surface.height


def draw_generative(surface: RasterSurface, layer: TransformedLayer, preview_url: Optional[str]) -> None:
    c = layer.coords
    if preview_url:
        # A single preview is shared by every generative layer, so only hint at it
        surface.fill_gradient_rect(c.x, c.y, c.w, c.h, *HINT_GRADIENT)
        surface.stroke_rect(c.x, c.y, c.w, c.h, HINT_OUTLINE, 2)
        surface.draw_label(c.x + 4, c.y + 4, HINT_LABEL, HINT_OUTLINE)
    else:
        surface.fill_gradient_rect(c.x, c.y, c.w, c.h, *PLACEHOLDER_GRADIENT)
        surface.stroke_rect(c.x, c.y, c.w, c.h, PLACEHOLDER_OUTLINE, 1)


def draw_native(surface: RasterSurface, layer: TransformedLayer, document: NativeDocument) -> bool:
    source = find_layer_by_path(document, layer.id)
    if source is None or source.canvas is None:
        logger.debug(f"Layer {layer.id}: no pixel source in the original document, skipped.")
        return False
    c = layer.coords
    surface.set_alpha(layer.opacity)
    surface.draw_image(source.canvas, c.x, c.y, c.w, c.h, layer.transform.rotation or 0)
    return True


def paint_layers(surface: RasterSurface, payload: TransformedPayload, document: NativeDocument) -> RenderStats:
    """
    Paint the payload tree bottom-to-top.

    Index 0 is the topmost layer, so siblings are painted from the last one
    to the first, each subtree completely before the sibling above it. A
    layer's own children are painted over it. Every node draws inside its
    own save/restore scope and a failure is contained to that node.
    """
    stats = RenderStats()
    target = payload.metrics.target
    stack = [RenderFrame(layer, target.x, target.y) for layer in payload.layers]

    while stack:
        frame = stack.pop()
        layer = frame.layer

        if not layer.is_visible:
            stats.hidden += 1
            continue
        if is_outside_canvas(layer, frame, surface):
            stats.culled += 1
            continue

        if layer.kind != "group":
            with surface.scoped():
                try:
                    surface.translate(-frame.offset_x, -frame.offset_y)
                    if layer.kind == "generative":
                        draw_generative(surface, layer, payload.preview_url)
                        stats.placeholders += 1
                    elif draw_native(surface, layer, document):
                        stats.drawn += 1
                    else:
                        stats.missing += 1
                except Exception as e:
                    stats.failed += 1
                    logger.warning(f"Layer {layer.id}: drawing failed ({type(e).__name__}: {e}), skipped.")

        if layer.children:
            stack.extend(RenderFrame(child, frame.offset_x, frame.offset_y) for child in layer.children)

    return stats


def acquire_surface(width: int, height: int, background=None, factory: SurfaceFactory = PillowSurface) -> Optional[RasterSurface]:
    if max(width, height) > settings.MAX_PREVIEW_SIDE:
        logger.warning(f"Preview {width}x{height} exceeds MAX_PREVIEW_SIDE={settings.MAX_PREVIEW_SIDE}.")
        return None
    try:
        return factory(width, height, background)
    except (ValueError, MemoryError) as e:
        logger.error(f"Could not allocate a {width}x{height} surface: {e}")
        return None


def composite_payload(
    payload: TransformedPayload,
    document: NativeDocument,
    background=None,
    fmt: Optional[str] = None,
    quality: Optional[int] = None,
    surface_factory: SurfaceFactory = PillowSurface,
) -> Optional[bytes]:
    """Render ``payload`` with pixels taken from ``document``; None if no surface is available."""
    target = payload.metrics.target
    if target.w <= 0 or target.h <= 0:
        return None

    if background is None:
        background = settings.PREVIEW_BACKGROUND
    surface = acquire_surface(target.w, target.h, background, surface_factory)
    if surface is None:
        return None

    stats = paint_layers(surface, payload, document)
    logger.info(
        f"Composite {target.w}x{target.h}: drawn={stats.drawn} placeholders={stats.placeholders} "
        f"hidden={stats.hidden} culled={stats.culled} missing={stats.missing} failed={stats.failed}"
    )
    return surface.encode(fmt or settings.PREVIEW_FORMAT, quality or settings.JPEG_QUALITY)


def composite_payload_to_data_uri(payload: TransformedPayload, document: NativeDocument, **kwargs) -> Optional[str]:
    fmt = kwargs.get("fmt") or settings.PREVIEW_FORMAT
    data = composite_payload(payload, document, **kwargs)
    if data is None:
        return None
    return to_data_uri(data, fmt)
