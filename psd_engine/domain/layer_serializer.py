# psd_engine/domain/layer_serializer.py
from typing import List, Sequence

from psd_engine.delivery.schemas.template import Rect, SerializableLayer
from psd_engine.domain.layer_path import PATH_ROOT, child_path
from psd_engine.domain.native import NativeDocument, NativeNode
from psd_engine.domain.template_extractor import is_template_root


def serialize_layer(node: NativeNode, layer_id: str, index: int) -> SerializableLayer:
    left = node.left or 0
    top = node.top or 0
    return SerializableLayer(
        id=layer_id,
        name=node.name or f"Layer {index}",
        kind="group" if node.children is not None else "layer",
        is_visible=not node.hidden,
        opacity=node.opacity / 255 if node.opacity is not None else 1.0,
        coords=Rect(
            x=left,
            y=top,
            w=(node.right or 0) - left,
            h=(node.bottom or 0) - top,
        ),
        children=serialize_children(node.children, layer_id) if node.children is not None else None,
    )


def serialize_children(nodes: Sequence[NativeNode], parent_id: str = PATH_ROOT) -> List[SerializableLayer]:
    # Indices come from the unfiltered child list: a skipped template group
    # still occupies its slot, otherwise resolve() would land on a neighbour.
    return [
        serialize_layer(node, child_path(parent_id, index), index)
        for index, node in enumerate(nodes)
        if not is_template_root(node)
    ]


def serialize_layer_tree(document: NativeDocument) -> List[SerializableLayer]:
    return serialize_children(document.children or [])
