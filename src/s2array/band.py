# src/s2array/band.py

"""
This module defines the band index built during product discovery.

A BandGroup describes one subdataset (path, CRS, geo-transform, extent) and
is shared by all the bands it contains. A BandInfo points at one band of a
group by its 1-based index. Bands is the name -> BandInfo map, which keeps
only the finest-resolution occurrence of each band name.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Tuple

import numpy as np
import rasterio
from rasterio.transform import Affine

from . import io
from .exceptions import BandNotFoundError
from .transform import resolution

log = logging.getLogger(__name__)

__all__ = [
    "BAND_NAME_KEY",
    "BandGroup",
    "BandInfo",
    "Bands"
]

BAND_NAME_KEY = "BANDNAME"

@dataclass(frozen=True)
class BandGroup:
    """
    Geo-referencing shared by every band of a subdataset.

    Args:
        path: Subdataset identifier understood by the raster library.
        crs: Opaque CRS string (WKT). Equal strings mean equal CRS.
        geo_transform: Pixel -> CRS affine transform.
        width: Raster width in pixels.
        height: Raster height in pixels.
    """
    path: str
    crs: str
    geo_transform: Affine
    width: int
    height: int

    @property
    def extent(self) -> Tuple[int, int]:
        return (self.width, self.height)

    @classmethod
    def from_dataset(cls, src: rasterio.DatasetReader) -> "BandGroup":
        return cls(
            path=src.name,
            crs=io.read_projection(src),
            geo_transform=io.read_transform(src),
            width=src.width,
            height=src.height
        )

@dataclass(frozen=True)
class BandInfo:
    """
    One spectral band of a product.

    Args:
        index: 1-based band index inside the subdataset.
        group: The owning subdataset.
        metadata: Band-level metadata, contains at least BANDNAME.
    """
    index: int
    group: BandGroup
    metadata: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "metadata", MappingProxyType(dict(self.metadata)))

    @property
    def subdataset_path(self) -> str:
        return self.group.path

    @property
    def geo_transform(self) -> Affine:
        return self.group.geo_transform

    @property
    def crs(self) -> str:
        return self.group.crs

    @property
    def extent(self) -> Tuple[int, int]:
        return self.group.extent

    def resolution(self) -> int:
        """Native pixel size, e.g. 10, 20 or 60 for Sentinel-2."""
        return resolution(self.geo_transform)

    @contextmanager
    def open_reader(self) -> Iterator[rasterio.DatasetReader]:
        """Open the owning subdataset; the handle is closed on exit."""
        with io.open_dataset(self.subdataset_path) as src:
            yield src

    def read_window(self, offset: Tuple[int, int], size: Tuple[int, int]) -> np.ndarray:
        """Read a (col, row) / (width, height) window of this band as uint16."""
        with self.open_reader() as src:
            return io.read_window(src, self.index, offset, size)

class Bands(Mapping[str, BandInfo]):
    """
    Name -> BandInfo mapping that keeps the finest resolution per name.

    When a name is inserted twice, the entry with the smaller x pixel size
    wins; on an exact tie the first inserted entry is kept.
    """

    def __init__(self):
        self._bands: Dict[str, BandInfo] = {}

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, BandInfo]]) -> "Bands":
        bands = cls()
        for band_name, band_info in pairs:
            bands.insert(band_name, band_info)
        return bands

    def insert(self, band_name: str, band_info: BandInfo):
        existing = self._bands.get(band_name)
        if existing is not None and existing.geo_transform.a <= band_info.geo_transform.a:
            log.debug(
                f"Keeping {band_name} at {existing.resolution()}m, "
                f"ignoring {band_info.resolution()}m from {band_info.subdataset_path}"
            )
            return
        self._bands[band_name] = band_info

    def get(self, band_name: str, default=None):
        return self._bands.get(band_name, default)

    def require(self, band_name: str) -> BandInfo:
        try:
            return self._bands[band_name]
        except KeyError:
            raise BandNotFoundError(band_name) from None

    def names(self) -> List[str]:
        return sorted(self._bands)

    def __getitem__(self, band_name: str) -> BandInfo:
        return self._bands[band_name]

    def __iter__(self):
        return iter(self._bands)

    def __len__(self) -> int:
        return len(self._bands)

    def __repr__(self) -> str:
        return f"Bands({self.names()})"
