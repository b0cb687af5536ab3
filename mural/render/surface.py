"""RasterSurface — Pillow RGBA drawing surface in logical pixels.

Callers draw in logical (CSS) pixels; the surface multiplies by the device
pixel ratio once, so the backing image is ``round(w·dpr) × round(h·dpr)``.
Each shape is drawn on a small layer cropped to its bounds and
alpha-composited, so translucent fills blend instead of overwriting.
"""

from __future__ import annotations

import io
import math
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageColor, ImageDraw, ImageFilter

BACKGROUND = "#0a0a0f"

# Canvas shadowBlur is roughly twice the Gaussian sigma
_BLUR_TO_SIGMA = 0.5
# Halo layers extend this many sigmas past the shape bounds
_HALO_PAD_SIGMAS = 3.0


def rgba(color: str, alpha: float = 1.0) -> tuple[int, int, int, int]:
    """Parse any PIL colour string and apply an extra 0..1 alpha factor."""
    parsed = ImageColor.getrgb(color)
    base_alpha = parsed[3] if len(parsed) == 4 else 255
    a = int(round(base_alpha * max(0.0, min(1.0, alpha))))
    return (parsed[0], parsed[1], parsed[2], a)


class RasterSurface:
    """Pixel surface for one mural frame."""

    def __init__(
        self,
        width: float,
        height: float,
        device_pixel_ratio: float = 1.0,
        background: str = BACKGROUND,
    ) -> None:
        self.background = background
        self.width = float(width)
        self.height = float(height)
        self.device_pixel_ratio = device_pixel_ratio
        self.image = self._blank()

    @property
    def pixel_size(self) -> tuple[int, int]:
        dpr = self.device_pixel_ratio
        return (max(1, round(self.width * dpr)), max(1, round(self.height * dpr)))

    def resize(self, width: float, height: float, device_pixel_ratio: float | None = None) -> None:
        self.width = float(width)
        self.height = float(height)
        if device_pixel_ratio is not None:
            self.device_pixel_ratio = device_pixel_ratio
        self.image = self._blank()

    def clear(self) -> None:
        self.image = self._blank()

    # ── Drawing ──

    def fill_polygon(
        self,
        points: NDArray[np.float64],
        color: str,
        alpha: float = 1.0,
        glow_color: str | None = None,
        glow_blur: float = 0.0,
    ) -> None:
        """Fill a polygon given in logical pixels, optionally over a blurred halo."""
        device = np.asarray(points, dtype=float) * self.device_pixel_ratio
        if device.shape[0] < 3:
            return
        if glow_color is not None and glow_blur > 0:
            self._halo(device, glow_color, glow_blur * self.device_pixel_ratio)
        self._composite(device, 0.0, lambda draw, pts: draw.polygon(pts, fill=rgba(color, alpha)))

    def fill_circle(self, cx: float, cy: float, r: float, color: str, alpha: float = 1.0) -> None:
        dpr = self.device_pixel_ratio
        box = np.array([[cx - r, cy - r], [cx + r, cy + r]]) * dpr
        self._composite(box, 0.0, lambda draw, pts: draw.ellipse(pts, fill=rgba(color, alpha)))

    def stroke_circle(
        self,
        cx: float,
        cy: float,
        r: float,
        color: str,
        alpha: float = 1.0,
        line_width: float = 1.0,
    ) -> None:
        dpr = self.device_pixel_ratio
        w = max(1, round(line_width * dpr))
        half = line_width / 2
        box = np.array([[cx - r - half, cy - r - half], [cx + r + half, cy + r + half]]) * dpr
        self._composite(
            box, 0.0, lambda draw, pts: draw.ellipse(pts, outline=rgba(color, alpha), width=w)
        )

    def text_centered(self, cx: float, cy: float, text: str, color: str, alpha: float = 1.0) -> None:
        dpr = self.device_pixel_ratio
        draw = ImageDraw.Draw(self.image)
        left, top, right, bottom = draw.textbbox((0, 0), text)
        x = cx * dpr - (right - left) / 2
        y = cy * dpr - (bottom - top) / 2
        draw.text((x, y), text, fill=rgba(color, alpha))

    # ── Output ──

    def pixel(self, x: float, y: float) -> tuple[int, int, int, int]:
        """RGBA at a logical-pixel position."""
        dpr = self.device_pixel_ratio
        px = min(self.image.width - 1, max(0, int(x * dpr)))
        py = min(self.image.height - 1, max(0, int(y * dpr)))
        return self.image.getpixel((px, py))

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.image.save(buf, format="PNG")
        return buf.getvalue()

    def save(self, path: str | Path) -> None:
        self.image.save(Path(path), format="PNG")

    # ── Internals ──

    def _blank(self) -> Image.Image:
        return Image.new("RGBA", self.pixel_size, rgba(self.background))

    def _halo(self, device: NDArray[np.float64], color: str, blur: float) -> None:
        sigma = blur * _BLUR_TO_SIGMA
        pad = sigma * _HALO_PAD_SIGMAS
        fill = rgba(color)
        self._composite(
            device,
            pad,
            lambda draw, pts: draw.polygon(pts, fill=fill),
            blur_sigma=sigma,
        )

    def _composite(self, device: NDArray[np.float64], pad: float, paint, blur_sigma: float = 0.0) -> None:
        """Paint onto a transparent layer covering ``device`` bounds and blend it in."""
        x0 = math.floor(device[:, 0].min() - pad) - 1
        y0 = math.floor(device[:, 1].min() - pad) - 1
        x1 = math.ceil(device[:, 0].max() + pad) + 1
        y1 = math.ceil(device[:, 1].max() + pad) + 1

        # Clip to the image; composite offsets must be non-negative
        cx0, cy0 = max(0, x0), max(0, y0)
        cx1, cy1 = min(self.image.width, x1), min(self.image.height, y1)
        if cx1 <= cx0 or cy1 <= cy0:
            return

        layer = Image.new("RGBA", (cx1 - cx0, cy1 - cy0), (0, 0, 0, 0))
        local = [(float(x - cx0), float(y - cy0)) for x, y in device]
        paint(ImageDraw.Draw(layer), local)
        if blur_sigma > 0:
            layer = layer.filter(ImageFilter.GaussianBlur(blur_sigma))
        self.image.alpha_composite(layer, dest=(cx0, cy0))
