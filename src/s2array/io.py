# src/s2array/io.py

"""
This module handles all disk-based operations for s2array.

It wraps rasterio so that the rest of the package only sees plain Python
mappings, affine transforms and numpy arrays, and so that every failure of
the raster library surfaces as a RasterIOError.
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Tuple, Union

import numpy as np
import rasterio
from rasterio.errors import RasterioError
from rasterio.transform import Affine
from rasterio.windows import Window

from .exceptions import RasterIOError

log = logging.getLogger(__name__)

__all__ = [
    "open_dataset",
    "read_tags",
    "list_subdatasets",
    "read_band_tags",
    "read_transform",
    "read_projection",
    "read_window"
]

SUBDATASETS_DOMAIN = "SUBDATASETS"

@contextmanager
def open_dataset(path: Union[str, Path]) -> Iterator[rasterio.DatasetReader]:
    """
    Open a dataset read-only and close it when the block exits.

    Args:
        path: Any identifier understood by GDAL (file path, subdataset
              string such as 'SENTINEL2_L2A:...:10m:EPSG_32633', VSI path).

    Raises:
        RasterIOError: If the dataset cannot be opened.
    """
    log.debug(f"Opening dataset: {path}")

    try:
        src = rasterio.open(path)
    except RasterioError as e:
        raise RasterIOError(f"Failed to open {path}: {e}") from e

    with src:
        yield src

def read_tags(src: rasterio.DatasetReader) -> Dict[str, str]:
    """Return the default-domain metadata of a dataset."""
    try:
        return dict(src.tags())
    except RasterioError as e:
        raise RasterIOError(f"Failed to read metadata from {src.name}: {e}") from e

def list_subdatasets(src: rasterio.DatasetReader) -> List[str]:
    """
    Return the identifiers of the child datasets declared by a product.

    Only entries of the SUBDATASETS domain whose key contains 'NAME' are
    considered (the matching '_DESC' entries are ignored).
    """
    try:
        entries = src.tags(ns=SUBDATASETS_DOMAIN)
    except RasterioError as e:
        raise RasterIOError(f"Failed to read subdatasets of {src.name}: {e}") from e

    return [value for key, value in entries.items() if "NAME" in key]

def read_band_tags(src: rasterio.DatasetReader, index: int) -> Dict[str, str]:
    """Return the default-domain metadata of the 1-based band `index`."""
    try:
        return dict(src.tags(index))
    except RasterioError as e:
        raise RasterIOError(f"Failed to read metadata of band {index} in {src.name}: {e}") from e

def read_transform(src: rasterio.DatasetReader) -> Affine:
    """
    Return the pixel -> CRS transform of a dataset.

    rasterio substitutes the identity matrix for a dataset without a
    geo-transform; that case is reported as a failure here.

    Raises:
        RasterIOError: If the dataset carries no geo-transform.
    """
    transform = src.transform
    gcps, _ = src.gcps
    if transform.is_identity and src.crs is None and not gcps:
        raise RasterIOError(f"{src.name} has no geo-transform")
    return transform

def read_projection(src: rasterio.DatasetReader) -> str:
    """Return the dataset CRS as WKT, or an empty string when it has none."""
    return src.crs.to_wkt() if src.crs else ""

def read_window(
    src: rasterio.DatasetReader,
    index: int,
    offset: Tuple[int, int],
    size: Tuple[int, int]
) -> np.ndarray:
    """
    Read a rectangular window of a band as a 2D uint16 array.

    Args:
        src: Opened dataset.
        index: 1-based band index.
        offset: (col, row) of the upper-left pixel.
        size: (width, height) of the window.

    Returns:
        np.ndarray: Array of shape (height, width).
    """
    width, height = size
    if width == 0 or height == 0:
        return np.zeros((height, width), dtype=np.uint16)

    window = Window(offset[0], offset[1], width, height)
    log.debug(f"Reading window {window} of band {index} from {src.name}")

    try:
        return src.read(index, window=window, out_dtype="uint16")
    except RasterioError as e:
        raise RasterIOError(f"Failed to read window {window} from {src.name}: {e}") from e
