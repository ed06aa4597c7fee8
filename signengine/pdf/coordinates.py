"""
Viewport to PDF coordinate mapping.

Browser viewport: pixels, origin at top-left, Y grows downward.
PDF page: points (1/72 inch), origin at bottom-left, Y grows upward.

The viewer may render the page at any zoom, so the scale is derived from the
reported viewport size rather than from a fixed DPI. X and Y scales are
computed independently.
"""
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from signengine.errors import ConfigurationError


@dataclass(frozen=True)
class ViewportRect:
    """Field rectangle as reported by the viewer, in pixels from top-left."""
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class ViewportSize:
    """Rendered page size in the viewer, in pixels."""
    width: Optional[float]
    height: Optional[float]


@dataclass(frozen=True)
class PageSize:
    """Intrinsic page size in points."""
    width: float
    height: float


@dataclass(frozen=True)
class MappedBox:
    """
    Field box in PDF points.

    x is the left edge, top is the upper edge (PDF Y, bottom-left origin).
    """
    x: float
    top: float
    width: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top - self.height

    @property
    def right(self) -> float:
        return self.x + self.width


def _check_dimension(value: Optional[float], name: str) -> float:
    if value is None:
        raise ConfigurationError(f"Viewport {name} is missing")
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Viewport {name} is not a number: {value!r}") from e
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"Viewport {name} must be positive, got: {value}")
    return value


def compute_scale(viewport: ViewportSize, page: PageSize) -> Tuple[float, float]:
    """
    Points-per-pixel scale factors for each axis.

    Raises:
        ConfigurationError: If viewport width or height is zero, negative or missing
    """
    viewport_width = _check_dimension(viewport.width, "width")
    viewport_height = _check_dimension(viewport.height, "height")
    return page.width / viewport_width, page.height / viewport_height


def map_point(x: float, y: float, viewport: ViewportSize, page: PageSize) -> Tuple[float, float]:
    """Map a viewport point to page space (flips Y)."""
    scale_x, scale_y = compute_scale(viewport, page)
    return x * scale_x, page.height - y * scale_y


def map_size(width: float, height: float, viewport: ViewportSize, page: PageSize) -> Tuple[float, float]:
    """Map a viewport width/height to points using the same scales as map_point."""
    scale_x, scale_y = compute_scale(viewport, page)
    return width * scale_x, height * scale_y


def map_rect(rect: ViewportRect, viewport: ViewportSize, page: PageSize) -> MappedBox:
    """
    Map a viewport rectangle to a page box.

    Example (US Letter page 612x792pt in an 800x1000px viewport):
        map_rect(ViewportRect(100, 200, 200, 100), ViewportSize(800, 1000), PageSize(612, 792))
        -> MappedBox(x=76.5, top=633.6, width=153.0, height=79.2)
    """
    x, top = map_point(rect.x, rect.y, viewport, page)
    width, height = map_size(rect.width, rect.height, viewport, page)
    return MappedBox(x=x, top=top, width=width, height=height)
