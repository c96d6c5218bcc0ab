# psd_engine/domain/layer_path.py
"""
Path ids: the address of a node in the native tree.

An id is the root segment followed by the child-array index taken at every
depth, e.g. ``root-2-0`` is the first child of the third top-level layer.
The serializer encodes ids and the resolver decodes them; both go through
this module so the two sides can never disagree on the format.
"""
from typing import List, Optional, Sequence

PATH_SCHEME_VERSION = 1
PATH_ROOT = "root"
PATH_SEPARATOR = "-"


def encode_path(indices: Sequence[int]) -> str:
    for idx in indices:
        if idx < 0:
            raise ValueError(f"Path index must be non-negative, got {idx}")
    return PATH_SEPARATOR.join([PATH_ROOT, *(str(i) for i in indices)])


def child_path(parent_id: str, index: int) -> str:
    if index < 0:
        raise ValueError(f"Path index must be non-negative, got {index}")
    return f"{parent_id}{PATH_SEPARATOR}{index}"


def decode_path(layer_id: Optional[str]) -> Optional[List[int]]:
    """Return the index list of ``layer_id``, or None if it is not a valid path id."""
    if not layer_id:
        return None
    head, *segments = layer_id.split(PATH_SEPARATOR)
    if head != PATH_ROOT:
        return None
    indices = []
    for segment in segments:
        # plain ASCII digits, no leading zeros: one id per node
        if not segment.isascii() or not segment.isdigit():
            return None
        if len(segment) > 1 and segment.startswith("0"):
            return None
        indices.append(int(segment))
    return indices
