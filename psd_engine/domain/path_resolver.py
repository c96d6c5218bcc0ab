# psd_engine/domain/path_resolver.py
from typing import Optional

from psd_engine.domain.layer_path import decode_path
from psd_engine.domain.native import NativeDocument, NativeNode


def find_layer_by_path(document: NativeDocument, layer_id: str) -> Optional[NativeNode]:
    """
    Walk the native tree along the indices encoded in ``layer_id``.

    Uses the same child lists as the serializer, so the result is only
    meaningful for the unmutated tree the id was produced from. Returns None
    for malformed ids and for indices that fall outside any child list.
    """
    indices = decode_path(layer_id)
    if indices is None:
        return None

    current_children = document.children
    current = None
    for idx in indices:
        if not current_children or idx >= len(current_children):
            return None
        current = current_children[idx]
        current_children = current.children
    return current
