# psd_engine/domain/template_extractor.py
import logging
import re
from typing import Optional

from psd_engine.config.settings import settings
from psd_engine.delivery.schemas.template import (
    CanvasDimensions,
    CanvasSize,
    ContainerContext,
    ContainerDefinition,
    Rect,
    TemplateMetadata,
)
from psd_engine.domain.errors import InvertedBoundsError
from psd_engine.domain.native import NativeDocument, NativeNode

logger = logging.getLogger(__name__)

_SLUG_RE = re.compile(r"[^a-z0-9]+")


def is_template_root(node: NativeNode) -> bool:
    return node.name == settings.TEMPLATE_GROUP_NAME


def find_template_root(document: NativeDocument) -> Optional[NativeNode]:
    for child in document.children or []:
        if is_template_root(child):
            return child
    return None


def clean_container_name(raw_name: str) -> str:
    prefix = settings.TEMPLATE_PREFIX
    if prefix and raw_name.startswith(prefix):
        return raw_name[len(prefix):]
    return raw_name


def container_id(index: int, name: str) -> str:
    slug = _SLUG_RE.sub("-", name.lower()).strip("-")
    return f"container-{index}-{slug}" if slug else f"container-{index}"


def _positive_or_one(value) -> int:
    return value if value and value > 0 else 1


def extract_template_metadata(
    document: NativeDocument,
    canvas_width: Optional[int] = None,
    canvas_height: Optional[int] = None,
    strict_bounds: Optional[bool] = None,
) -> TemplateMetadata:
    """
    Build the container catalog from the ``!!TEMPLATE`` group.

    Every direct child of the template group becomes one container, in
    document order. Children without a box become zero-area containers at
    the origin. Canvas dimensions fall back to the document's own size and
    are never below 1, so normalized bounds are always defined.
    """
    width = _positive_or_one(canvas_width if canvas_width is not None else document.width)
    height = _positive_or_one(canvas_height if canvas_height is not None else document.height)
    strict = settings.STRICT_CONTAINER_BOUNDS if strict_bounds is None else strict_bounds

    containers = []
    template_root = find_template_root(document)
    if template_root is None:
        logger.debug("No %s group found, template has no containers.", settings.TEMPLATE_GROUP_NAME)

    for index, child in enumerate((template_root.children or []) if template_root else []):
        top = child.top or 0
        left = child.left or 0
        box_w = (child.right or 0) - left
        box_h = (child.bottom or 0) - top

        raw_name = child.name or f"Container {index}"
        name = clean_container_name(raw_name)

        if box_w < 0 or box_h < 0:
            if strict:
                raise InvertedBoundsError(name, box_w, box_h)
            logger.warning(f"Container '{name}' has inverted bounds (w={box_w}, h={box_h}).")

        containers.append(ContainerDefinition(
            id=container_id(index, name),
            name=name,
            original_name=raw_name,
            bounds=Rect(x=left, y=top, w=box_w, h=box_h),
            normalized=Rect(
                x=left / width,
                y=top / height,
                w=box_w / width,
                h=box_h / height,
            ),
        ))

    return TemplateMetadata(
        canvas=CanvasSize(width=width, height=height),
        containers=containers,
    )


def create_container_context(template: TemplateMetadata, container_name: str) -> Optional[ContainerContext]:
    container = next((c for c in template.containers if c.name == container_name), None)
    if container is None:
        return None
    return ContainerContext(
        container_name=container.name,
        bounds=container.bounds,
        canvas_dimensions=CanvasDimensions(w=template.canvas.width, h=template.canvas.height),
    )
