# psd_engine/infrastructure/psd/psd_codec.py
import logging
import struct
from io import BytesIO
from typing import Iterator

from psd_tools import PSDImage

from psd_engine.domain.errors import (
    EmptyDocumentError,
    PsdCorruptedError,
    PsdFormatError,
    PsdParseError,
)
from psd_engine.domain.native import NativeDocument, NativeNode

logger = logging.getLogger(__name__)

_TRUNCATION_MARKERS = ("read=", "out of bounds", "unexpected end", "truncated")


def _describe_failure(error: Exception) -> PsdParseError:
    message = str(error)
    lowered = message.lower()
    if "signature" in lowered:
        return PsdFormatError(
            "Invalid file format. The file does not appear to be a valid Adobe Photoshop file."
        )
    if isinstance(error, (EOFError, struct.error, IndexError)) or any(m in lowered for m in _TRUNCATION_MARKERS):
        return PsdCorruptedError(
            "The PSD file appears to be corrupted or truncated (Buffer out of bounds)."
        )
    return PsdParseError(f"PSD Parsing Error: {message or type(error).__name__}")


def adapt_layer(layer, load_pixels: bool = True) -> NativeNode:
    children = None
    canvas = None
    if layer.is_group():
        # psd-tools lists layers bottom-first; the native tree keeps the topmost at index 0
        children = [adapt_layer(child, load_pixels) for child in reversed(list(layer))]
    elif load_pixels:
        try:
            canvas = layer.topil()
        except Exception as e:
            logger.warning(f"Layer '{layer.name}': pixel data unreadable ({type(e).__name__}), kept without pixels.")

    return NativeNode(
        name=layer.name,
        hidden=not layer.visible,
        opacity=layer.opacity,
        top=layer.top,
        left=layer.left,
        bottom=layer.bottom,
        right=layer.right,
        children=children,
        canvas=canvas,
        source=layer,
    )


def adapt_document(psd, load_pixels: bool = True) -> NativeDocument:
    return NativeDocument(
        width=psd.width,
        height=psd.height,
        children=[adapt_layer(layer, load_pixels) for layer in reversed(list(psd))],
        source=psd,
    )


def parse_psd_bytes(data: bytes, skip_layer_image_data: bool = False) -> NativeDocument:
    """
    Decode a PSD buffer into the native tree.

    Raises EmptyDocumentError, PsdFormatError, PsdCorruptedError or a plain
    PsdParseError so callers can tell a wrong file type from a damaged one.
    """
    if data is None or len(data) == 0:
        raise EmptyDocumentError("The provided file is empty.")

    try:
        psd = PSDImage.open(BytesIO(data))
        return adapt_document(psd, load_pixels=not skip_layer_image_data)
    except Exception as e:
        logger.error(f"PSD parsing failed: {type(e).__name__}: {e}")
        raise _describe_failure(e) from e


def iter_nodes(document: NativeDocument) -> Iterator[NativeNode]:
    stack = list(reversed(document.children or []))
    while stack:
        node = stack.pop()
        yield node
        if node.children:
            stack.extend(reversed(node.children))


def _sync_layer(node: NativeNode) -> None:
    layer = node.source
    if node.name is not None and layer.name != node.name:
        layer.name = node.name
    visible = not node.hidden
    if layer.visible != visible:
        layer.visible = visible
    if node.opacity is not None and layer.opacity != node.opacity:
        layer.opacity = node.opacity


def encode_psd_document(document: NativeDocument) -> bytes:
    """Write name, visibility and opacity edits back to the decoded PSD and save it."""
    if document.source is None:
        raise ValueError("Document was not decoded from a PSD and cannot be re-encoded.")

    for node in iter_nodes(document):
        if node.source is not None:
            _sync_layer(node)

    buf = BytesIO()
    document.source.save(buf)
    return buf.getvalue()
