# src/s2array/transform.py

"""
This module provides the pixel-space affine helpers used by the read engine.

Transforms are affine.Affine objects (re-exported by rasterio). Composition
follows the affine convention: (A * B) applies B first, then A. Points are
mapped with matrix multiplication, T @ (x, y).
"""

import logging
import math
from typing import Optional, Sequence, Tuple

from affine import TransformNotInvertibleError
from rasterio.transform import Affine

log = logging.getLogger(__name__)

__all__ = [
    "from_gdal",
    "inverse",
    "transform_point",
    "band_transform",
    "transform_window",
    "resolution"
]

Offset = Tuple[int, int]
Size = Tuple[int, int]

def from_gdal(gt: Sequence[float]) -> Affine:
    """
    Build a pixel transform from a GDAL 6-value geo-transform.

    x = gt0 + col * gt1 + row * gt2
    y = gt3 + col * gt4 + row * gt5
    """
    if len(gt) != 6:
        raise ValueError(f"Geo-transform must have 6 values, got {len(gt)}")
    return Affine.from_gdal(*gt)

def inverse(transform: Affine) -> Optional[Affine]:
    """Return the inverse transform, or None if the matrix is singular."""
    try:
        return ~transform
    except TransformNotInvertibleError:
        return None

def transform_point(transform: Affine, point: Tuple[float, float]) -> Tuple[float, float]:
    return transform @ point

def band_transform(band: Affine, reference: Affine) -> Optional[Affine]:
    """
    Compose the transform taking reference-grid pixels to band pixels.

    Returns None when the band transform cannot be inverted.
    """
    band_inverse = inverse(band)
    if band_inverse is None:
        return None
    return band_inverse * reference

def transform_window(
    offset: Offset,
    size: Size,
    transform: Affine,
    extent: Size
) -> Tuple[Offset, Size]:
    """
    Map an output window into the source pixel grid.

    The four corners of the window are projected through the transform, the
    bounding box is expanded to whole pixels (floor of the minimum, ceil of
    the maximum) and clamped to the source extent.

    Args:
        offset: (col, row) origin of the output window.
        size: (width, height) of the output window.
        transform: Output pixel -> source pixel transform.
        extent: (width, height) of the source raster.

    Returns:
        Tuple[Offset, Size]: Corrected (col, row) offset and (width, height)
        size. The size is zero along an axis when the window falls outside
        the source.
    """
    col0, row0 = offset
    width, height = size
    corners = [
        transform @ (col0, row0),
        transform @ (col0 + width, row0),
        transform @ (col0, row0 + height),
        transform @ (col0 + width, row0 + height)
    ]
    xs = [x for x, _ in corners]
    ys = [y for _, y in corners]

    min_x = _clamp(math.floor(min(xs)), 0, extent[0])
    max_x = _clamp(math.ceil(max(xs)), 0, extent[0])
    min_y = _clamp(math.floor(min(ys)), 0, extent[1])
    max_y = _clamp(math.ceil(max(ys)), 0, extent[1])

    return (min_x, min_y), (max_x - min_x, max_y - min_y)

def resolution(transform: Affine) -> int:
    """Pixel size along x truncated to an unsigned byte."""
    return _clamp(int(transform.a), 0, 255)

def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))
