# psd_engine/infrastructure/raster/surface.py
import base64
from contextlib import contextmanager
from dataclasses import dataclass, replace
from io import BytesIO
from typing import Iterator, List, Optional, Protocol, Tuple, Union

import numpy as np
from PIL import Image, ImageColor, ImageDraw, ImageFont

Color = Union[str, Tuple[int, int, int], Tuple[int, int, int, int]]


class RasterSurface(Protocol):
    """Drawing capabilities the compositor relies on."""

    width: int
    height: int

    def save(self) -> None: ...
    def restore(self) -> None: ...
    def scoped(self): ...
    def translate(self, dx: float, dy: float) -> None: ...
    def set_alpha(self, alpha: float) -> None: ...
    def fill_rect(self, x: float, y: float, w: float, h: float, fill: Color) -> None: ...
    def fill_gradient_rect(self, x: float, y: float, w: float, h: float, start: Color, end: Color) -> None: ...
    def stroke_rect(self, x: float, y: float, w: float, h: float, outline: Color, line_width: int = 1) -> None: ...
    def draw_label(self, x: float, y: float, text: str, fill: Color) -> None: ...
    def draw_image(self, image: Image.Image, x: float, y: float, w: float, h: float, rotation: float = 0) -> None: ...
    def encode(self, fmt: str = "png", quality: int = 88) -> bytes: ...


@dataclass
class _DrawState:
    alpha: float = 1.0
    origin_x: float = 0.0
    origin_y: float = 0.0


def _rgba(color: Color) -> Tuple[int, int, int, int]:
    if isinstance(color, str):
        color = ImageColor.getrgb(color)
    if len(color) == 3:
        return (*color, 255)
    return tuple(color)


def mime_type(fmt: str) -> str:
    fmt = (fmt or "png").lower()
    return "image/jpeg" if fmt in ("jpg", "jpeg") else f"image/{fmt}"


def to_data_uri(data: bytes, fmt: str = "png") -> str:
    return f"data:{mime_type(fmt)};base64,{base64.b64encode(data).decode('ascii')}"


class PillowSurface:
    """
    RGBA canvas backed by a Pillow image.

    Keeps a canvas-like state stack (global alpha and translation). Every
    primitive is rendered into its own overlay, faded by the current alpha
    and alpha-composited onto the canvas, clipped to the canvas bounds.
    """

    def __init__(self, width: int, height: int, background: Optional[Color] = None):
        if width <= 0 or height <= 0:
            raise ValueError(f"Surface size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        fill = _rgba(background) if background is not None else (0, 0, 0, 0)
        self.image = Image.new("RGBA", (width, height), fill)
        self._state = _DrawState()
        self._stack: List[_DrawState] = []

    # --- state ---
    def save(self) -> None:
        self._stack.append(replace(self._state))

    def restore(self) -> None:
        if self._stack:
            self._state = self._stack.pop()

    @contextmanager
    def scoped(self) -> Iterator["PillowSurface"]:
        self.save()
        try:
            yield self
        finally:
            self.restore()

    def translate(self, dx: float, dy: float) -> None:
        self._state.origin_x += dx
        self._state.origin_y += dy

    def set_alpha(self, alpha: float) -> None:
        self._state.alpha = min(1.0, max(0.0, float(alpha)))

    @property
    def alpha(self) -> float:
        return self._state.alpha

    # --- primitives ---
    def fill_rect(self, x, y, w, h, fill):
        size = self._box_size(w, h)
        if size is None:
            return
        overlay = Image.new("RGBA", size, _rgba(fill))
        self._blend(overlay, x, y)

    def fill_gradient_rect(self, x, y, w, h, start, end):
        size = self._box_size(w, h)
        if size is None:
            return
        box_w, box_h = size
        t = np.linspace(0.0, 1.0, box_h, dtype=np.float32)[:, None]
        first = np.array(_rgba(start), dtype=np.float32)
        last = np.array(_rgba(end), dtype=np.float32)
        rows = first + (last - first) * t
        pixels = np.repeat(rows[:, None, :], box_w, axis=1).round().astype(np.uint8)
        self._blend(Image.fromarray(pixels), x, y)

    def stroke_rect(self, x, y, w, h, outline, line_width=1):
        size = self._box_size(w, h)
        if size is None:
            return
        overlay = Image.new("RGBA", size, (0, 0, 0, 0))
        ImageDraw.Draw(overlay).rectangle(
            (0, 0, size[0] - 1, size[1] - 1), outline=_rgba(outline), width=line_width
        )
        self._blend(overlay, x, y)

    def draw_label(self, x, y, text, fill):
        font = ImageFont.load_default()
        left, top, right, bottom = font.getbbox(text)
        overlay = Image.new("RGBA", (max(1, right - left), max(1, bottom - top)), (0, 0, 0, 0))
        ImageDraw.Draw(overlay).text((-left, -top), text, fill=_rgba(fill), font=font)
        self._blend(overlay, x, y)

    def draw_image(self, image, x, y, w, h, rotation=0):
        """Stretch ``image`` onto the box (x, y, w, h), rotated clockwise about its center."""
        size = self._box_size(w, h)
        if size is None:
            return
        if image.width == 0 or image.height == 0:
            raise ValueError("Source image is empty")
        stretched = image.convert("RGBA").resize(size, Image.Resampling.LANCZOS)
        if rotation:
            # Pillow rotates counter-clockwise; canvas rotation is clockwise in y-down space
            stretched = stretched.rotate(-rotation, resample=Image.Resampling.BICUBIC, expand=True)
        cx = x + w / 2
        cy = y + h / 2
        self._blend(stretched, cx - stretched.width / 2, cy - stretched.height / 2)

    # --- output ---
    def encode(self, fmt: str = "png", quality: int = 88) -> bytes:
        fmt = (fmt or "png").lower()
        img = self.image
        if fmt in ("jpg", "jpeg"):
            # JPEG can't have alpha
            img = img.convert("RGB")
            save_kwargs = dict(format="JPEG", quality=quality, optimize=True)
        elif fmt == "png":
            save_kwargs = dict(format="PNG", optimize=True)
        else:
            save_kwargs = dict(format=fmt.upper())

        buf = BytesIO()
        img.save(buf, **save_kwargs)
        return buf.getvalue()

    # --- helpers ---
    @staticmethod
    def _box_size(w: float, h: float) -> Optional[Tuple[int, int]]:
        box_w, box_h = int(round(w)), int(round(h))
        if box_w <= 0 or box_h <= 0:
            return None
        return box_w, box_h

    def _blend(self, overlay: Image.Image, x: float, y: float) -> bool:
        if self._state.alpha < 1.0:
            alpha = self._state.alpha
            faded = overlay.getchannel("A").point(lambda v: int(round(v * alpha)))
            overlay.putalpha(faded)

        left = int(round(x + self._state.origin_x))
        top = int(round(y + self._state.origin_y))
        right = left + overlay.width
        bottom = top + overlay.height

        x0, y0 = max(left, 0), max(top, 0)
        x1, y1 = min(right, self.width), min(bottom, self.height)
        if x0 >= x1 or y0 >= y1:
            return False
        if (x0, y0, x1, y1) != (left, top, right, bottom):
            overlay = overlay.crop((x0 - left, y0 - top, x1 - left, y1 - top))
        self.image.alpha_composite(overlay, dest=(x0, y0))
        return True
