# src/s2array/raster.py

"""
This module provides the product-level Raster object.

Opening a product walks its metadata, parses every subdataset in parallel and
indexes the bands by name, keeping the finest resolution of each. Reading
resamples any set of bands onto the pixel grid of the finest band with
nearest-neighbour sampling, reading only the window each band needs.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
from rasterio.transform import Affine

from . import io
from .band import BandGroup, BandInfo, Bands
from .config import ReaderConfig
from .exceptions import (
    BandTransformNotInvertibleError,
    MetadataKeyNotFoundError,
    MultipleProjectionsError
)
from .resources import allocate_cube
from .transform import band_transform, inverse, resolution, transform_window

log = logging.getLogger(__name__)

__all__ = [
    "Raster",
    "open_raster"
]

# Absorbs floating point round-off before flooring source coordinates.
_SNAP = 1e-9

BandRead = Tuple[np.ndarray, Affine, Tuple[int, int]]

class Raster:
    """
    A multi-resolution satellite product indexed by band name.

    The object is immutable once built and can be shared between threads.
    Use Raster.open() to discover a product on disk; the constructor is for
    callers that already hold a band index.

    Attributes:
        path (Path): Location of the product.
        metadata (Mapping[str, str]): Product-level metadata (default domain).
        bands (Bands): Band name -> BandInfo, finest resolution per name.
        crs (str): The single CRS shared by every band.
        reference_transform (Affine): Transform of the finest band; the output
            grid of read_bands.
        reference_band (str): Name of the band reference_transform comes from.
    """

    def __init__(
        self,
        path: Union[str, Path],
        metadata: Mapping[str, str],
        bands: Bands,
        config: Optional[ReaderConfig] = None
    ):
        """
        Args:
            path: Location of the product.
            metadata: Product-level metadata.
            bands: Deduplicated band index.
            config: Reader configuration (defaults to ReaderConfig()).

        Raises:
            MultipleProjectionsError: If the bands do not share exactly one CRS.
        """
        self.path = Path(path)
        self.metadata = MappingProxyType(dict(metadata))
        self.bands = bands
        self.config = config or ReaderConfig()

        projections = {band.crs for band in bands.values()}
        if len(projections) != 1:
            raise MultipleProjectionsError(str(path), projections)

        self.crs = projections.pop()
        self.reference_band, reference = min(
            bands.items(),
            key=lambda item: item[1].geo_transform.a
        )
        self.reference_transform = reference.geo_transform

    @classmethod
    def open(cls, path: Union[str, Path], config: Optional[ReaderConfig] = None) -> "Raster":
        """
        Discover the bands of a product.

        Args:
            path: Product location (e.g. a .SAFE directory, its MTD xml or
                  the zipped archive).
            config: Reader configuration.

        Returns:
            Raster: The indexed product.

        Raises:
            RasterIOError: If the product or a subdataset cannot be read.
            MetadataKeyNotFoundError: If a band has no name in its metadata.
            MultipleProjectionsError: If retained bands have different CRS.
        """
        config = config or ReaderConfig()

        with io.open_dataset(path) as src:
            metadata = io.read_tags(src)
            subdatasets = io.list_subdatasets(src)

        log.debug(f"Product {path} lists {len(subdatasets)} subdatasets")

        with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            parsed = list(executor.map(
                lambda subdataset: cls._parse_subdataset(subdataset, config),
                subdatasets
            ))

        bands = Bands.from_pairs(pair for pairs in parsed for pair in pairs)
        raster = cls(path, metadata, bands, config)

        log.info(
            f"Opened {Path(path).name}: {len(bands)} bands from {len(subdatasets)} subdatasets, "
            f"reference resolution {raster.reference_resolution}m"
        )
        return raster

    @staticmethod
    def _parse_subdataset(subdataset: str, config: ReaderConfig) -> List[Tuple[str, BandInfo]]:
        """Open one subdataset and emit a (band name, BandInfo) pair per band."""
        if config.skips(subdataset):
            log.debug(f"Skipping subdataset {subdataset}")
            return []

        pairs = []
        with io.open_dataset(subdataset) as src:
            group = BandGroup.from_dataset(src)
            for index in src.indexes:
                metadata = io.read_band_tags(src, index)
                band_name = metadata.get(config.band_name_key)
                if band_name is None:
                    raise MetadataKeyNotFoundError(group.path, config.band_name_key)
                pairs.append((band_name, BandInfo(index=index, group=group, metadata=metadata)))

        log.debug(f"Parsed {len(pairs)} bands at {resolution(group.geo_transform)}m from {subdataset}")
        return pairs

    @property
    def reference_resolution(self) -> int:
        return resolution(self.reference_transform)

    def band_names(self) -> List[str]:
        """Sorted names of the available bands."""
        return self.bands.names()

    def band(self, name: str) -> BandInfo:
        """Return the BandInfo for `name` or raise BandNotFoundError."""
        return self.bands.require(name)

    def resolutions(self) -> Dict[str, int]:
        return {name: self.bands[name].resolution() for name in self.band_names()}

    def read_bands(
        self,
        names: Sequence[str],
        offset: Tuple[int, int],
        size: Tuple[int, int]
    ) -> np.ndarray:
        """
        Read a window of several bands resampled onto the reference grid.

        Args:
            names: Band names, in output order. Duplicates are allowed.
            offset: (col, row) origin of the window in the reference grid.
            size: (width, height) of the window in reference pixels.

        Returns:
            np.ndarray: uint16 array of shape (len(names), width, height) where
            cube[c, x, y] is band c at reference column offset[0] + x and
            row offset[1] + y.

        Raises:
            BandNotFoundError: If a name is unknown (raised before any I/O).
            BandTransformNotInvertibleError: If a band transform is singular,
                or the reference transform is (raised before any I/O).
            RasterIOError: If a band window cannot be read.
            ShapeError: If the output does not fit in memory.
        """
        if isinstance(names, str):
            names = [names]
        col0, row0 = (int(v) for v in offset)
        width, height = (int(v) for v in size)
        if width < 0 or height < 0:
            raise ValueError(f"Window size must be non-negative, got {size}")

        requested = [(name, self.bands.require(name)) for name in names]
        if inverse(self.reference_transform) is None:
            raise BandTransformNotInvertibleError(self.reference_band)

        cube = allocate_cube(
            (len(requested), width, height),
            np.uint16,
            safety_factor=self.config.memory_safety_factor,
            min_free_gb=self.config.min_free_gb
        )

        log.debug(f"Reading {list(names)} at offset {(col0, row0)} size {(width, height)}")

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            reads = list(executor.map(
                lambda item: self._read_band(item[0], item[1], (col0, row0), (width, height)),
                requested
            ))

        if width == 0 or height == 0:
            return cube

        xs, ys = np.meshgrid(
            np.arange(col0, col0 + width, dtype=np.float64),
            np.arange(row0, row0 + height, dtype=np.float64),
            indexing="ij"
        )
        for c, band_read in enumerate(reads):
            cube[c] = _resample_nearest(band_read, xs, ys)

        return cube

    def _read_band(
        self,
        name: str,
        band: BandInfo,
        offset: Tuple[int, int],
        size: Tuple[int, int]
    ) -> BandRead:
        """Read the source window of one band covering the output window."""
        transform = band_transform(band.geo_transform, self.reference_transform)
        if transform is None:
            raise BandTransformNotInvertibleError(name)

        src_offset, src_size = transform_window(offset, size, transform, band.extent)
        log.debug(f"Band {name}: source window offset {src_offset} size {src_size}")

        window = band.read_window(src_offset, src_size)
        return window, transform, src_offset

    def __repr__(self) -> str:
        return (
            f"<Raster path={self.path.name} bands={len(self.bands)} "
            f"resolution={self.reference_resolution}m>"
        )

def _resample_nearest(band_read: BandRead, xs: np.ndarray, ys: np.ndarray) -> np.ndarray:
    """
    Sample a source window at the images of reference pixel coordinates.

    Args:
        band_read: (window, transform, (src_col0, src_row0)) from _read_band.
        xs, ys: Absolute reference columns and rows, shape (width, height).

    Returns:
        np.ndarray: uint16 plane of shape (width, height).
    """
    window, transform, (src_col0, src_row0) = band_read
    if window.size == 0:
        return np.zeros(xs.shape, dtype=np.uint16)

    us, vs = transform @ (xs, ys)
    cols = np.floor(us + _SNAP).astype(np.int64) - src_col0
    rows = np.floor(vs + _SNAP).astype(np.int64) - src_row0
    np.clip(cols, 0, window.shape[1] - 1, out=cols)
    np.clip(rows, 0, window.shape[0] - 1, out=rows)

    return window[rows, cols]

def open_raster(path: Union[str, Path], config: Optional[ReaderConfig] = None) -> Raster:
    """Shortcut for Raster.open()."""
    return Raster.open(path, config)
