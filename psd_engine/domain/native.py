# psd_engine/domain/native.py
from dataclasses import dataclass, field
from typing import Any, List, Optional

from PIL import Image


@dataclass
class NativeNode:
    """One decoded layer. Index 0 of ``children`` is the topmost layer."""

    name: Optional[str] = None
    hidden: bool = False
    opacity: Optional[int] = 255
    top: Optional[int] = None
    left: Optional[int] = None
    bottom: Optional[int] = None
    right: Optional[int] = None
    children: Optional[List["NativeNode"]] = None
    canvas: Optional[Image.Image] = None
    source: Any = field(default=None, repr=False, compare=False)


@dataclass
class NativeDocument:
    """Root of the native tree; the addressing scheme starts at its children."""

    width: int = 0
    height: int = 0
    children: List[NativeNode] = field(default_factory=list)
    source: Any = field(default=None, repr=False, compare=False)


def has_full_bounds(node: NativeNode) -> bool:
    for edge in (node.top, node.left, node.bottom, node.right):
        if isinstance(edge, bool) or not isinstance(edge, (int, float)):
            return False
    return True
