"""KPI value normalization, colour interpolation and heatmap textures."""

from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from PIL import Image, ImageColor

from core.models import KpiDomain

type Rgba = tuple[int, int, int, float]


@dataclass(frozen=True)
class Color:
    """RGB colour with channels in [0, 1]."""

    r: float
    g: float
    b: float

    @classmethod
    def named(cls, value: str) -> "Color":
        """Parse any CSS colour: keyword, hex or rgb()/hsl() form."""
        r, g, b = ImageColor.getrgb(value)[:3]
        return cls(r / 255, g / 255, b / 255)

    @property
    def hex(self) -> str:
        r, g, b = self.to_rgb8()
        return f"#{r:02x}{g:02x}{b:02x}"

    def to_rgb8(self) -> tuple[int, int, int]:
        return (round(self.r * 255), round(self.g * 255), round(self.b * 255))


def normalize(value: float, domain: KpiDomain) -> float:
    """Map a raw KPI value into [0, 1] against its domain, clamped at both ends."""
    span = domain.max - domain.min
    if span == 0:
        return 0.0 if value <= domain.min else 1.0
    return max(0.0, min(1.0, (value - domain.min) / span))


def lerp_color(a: Color, b: Color, t: float) -> Color:
    """Channel-wise linear interpolation in RGB."""
    return Color(
        a.r + (b.r - a.r) * t,
        a.g + (b.g - a.g) * t,
        a.b + (b.b - a.b) * t,
    )


def color_for(t: float, low: Color | None = None, high: Color | None = None) -> Color:
    """Colour for a normalized intensity: green at 0, red at 1 by default."""
    low = low or Color.named("green")
    high = high or Color.named("red")
    return lerp_color(low, high, max(0.0, min(1.0, t)))


# ---------------------------------------------------------------------------
# Textures
# ---------------------------------------------------------------------------


def linear_gradient(stops: list[tuple[float, Rgba]], width: int, height: int) -> NDArray[np.uint8]:
    """Rasterise a top-to-bottom gradient into an RGBA array of shape (height, width, 4).

    Follows 2D-canvas semantics: rows before the first stop take the first
    colour, rows after the last stop take the last one, and a single stop
    fills the whole image. No stops gives transparent black.
    """
    out = np.zeros((height, width, 4), dtype=np.uint8)
    if not stops or width <= 0 or height <= 0:
        return out

    ordered = sorted(stops, key=lambda s: s[0])
    offsets = np.array([s[0] for s in ordered], dtype=np.float64)
    channels = np.array([[r, g, b, a * 255] for _, (r, g, b, a) in ordered], dtype=np.float64)

    t = (np.arange(height, dtype=np.float64) + 0.5) / height
    rows = np.stack([np.interp(t, offsets, channels[:, c]) for c in range(4)], axis=-1)
    out[:] = np.clip(np.rint(rows), 0, 255).astype(np.uint8)[:, np.newaxis, :]
    return out


def heatmap_stops(t: float, cutoff: float, low: Rgba, high: Rgba) -> list[tuple[float, Rgba]]:
    """Gradient stops for one normalized value.

    Below the cutoff the texture is solid low-intensity green; at or above it
    a single high-intensity stop is placed at the value's own position.
    """
    if t < cutoff:
        return [(0.0, low)]
    return [(t, high)]


def heatmap_texture(
    value: float,
    domain: KpiDomain,
    width: int = 512,
    height: int = 512,
    cutoff: float = 0.7,
    low: Rgba = (5, 255, 10, 1.0),
    high: Rgba = (255, 0, 0, 0.97),
) -> Image.Image:
    """Generate the gradient image for one room's KPI value."""
    stops = heatmap_stops(normalize(value, domain), cutoff, low, high)
    return Image.fromarray(linear_gradient(stops, width, height))
