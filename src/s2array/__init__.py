# src/s2array/__init__.py
#
# Copyright (c) The s2array project contributors
# This software is distributed under the Apache-2.0 license.
# See the NOTICE file for more information

"""
s2array reads multi-resolution satellite products (Sentinel-2 SAFE archives
and other GDAL containers exposing subdatasets) as dense band cubes.

Bands are indexed by name across subdatasets and any window of any set of
bands is returned resampled onto the finest band grid:

    >>> import s2array
    >>> raster = s2array.open("S2B_MSIL2A_....SAFE.zip")
    >>> raster.band_names()
    ['AOT', 'B1', 'B11', 'B12', 'B2', ...]
    >>> cube = raster.read_bands(["B4", "B3", "B2"], (0, 0), (512, 512))
    >>> cube.shape
    (3, 512, 512)
"""
# Core data structures
from .raster import (
    Raster,
    open_raster
)
from .band import (
    BAND_NAME_KEY,
    BandGroup,
    BandInfo,
    Bands
)

# Configuration
from .config import (
    ReaderConfig
)

# Pixel transforms
from .transform import (
    from_gdal,
    inverse,
    transform_point,
    band_transform,
    transform_window,
    resolution
)

# Errors
from .exceptions import (
    RasterError,
    RasterIOError,
    ProjectionError,
    ShapeError,
    BandNotFoundError,
    BandTransformNotInvertibleError,
    MetadataKeyNotFoundError,
    MultipleProjectionsError
)

open = open_raster

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "open",
    "open_raster",

    # Core
    "Raster",
    "BAND_NAME_KEY",
    "BandGroup",
    "BandInfo",
    "Bands",

    # Configuration
    "ReaderConfig",

    # Transforms
    "from_gdal",
    "inverse",
    "transform_point",
    "band_transform",
    "transform_window",
    "resolution",

    # Errors
    "RasterError",
    "RasterIOError",
    "ProjectionError",
    "ShapeError",
    "BandNotFoundError",
    "BandTransformNotInvertibleError",
    "MetadataKeyNotFoundError",
    "MultipleProjectionsError"
]
