"""Shared test fixtures."""

from __future__ import annotations

import pytest
from PIL import Image

from psd_engine.domain.native import NativeDocument, NativeNode


def box(top, left, bottom, right) -> dict:
    return {"top": top, "left": left, "bottom": bottom, "right": right}


def solid(color, size=(10, 10)) -> Image.Image:
    return Image.new("RGBA", size, color)


@pytest.fixture
def template_document() -> NativeDocument:
    """200x100 document: design group BG, the template, design group SYMBOLS."""
    return NativeDocument(
        width=200,
        height=100,
        children=[
            NativeNode(
                name="BG",
                children=[
                    NativeNode(name="sky", **box(0, 0, 50, 50), canvas=solid("blue")),
                    NativeNode(name="overflow", **box(-5, 0, 50, 50), canvas=solid("red")),
                ],
            ),
            NativeNode(
                name="!!TEMPLATE",
                children=[
                    NativeNode(name="!!BG", **box(0, 0, 100, 200)),
                    NativeNode(name="!!SYMBOLS", **box(10, 120, 60, 190)),
                ],
            ),
            NativeNode(
                name="SYMBOLS",
                opacity=128,
                children=[
                    NativeNode(name="star", **box(20, 130, 40, 150), canvas=solid("yellow")),
                    NativeNode(name="loose"),
                ],
            ),
        ],
    )
