# src/s2array/exceptions.py

"""
This module defines the error taxonomy raised by s2array.

Every public entry point fails with a subclass of RasterError. Errors coming
from the underlying raster library are wrapped into RasterIOError while
keeping their original message.
"""

__all__ = [
    "RasterError",
    "RasterIOError",
    "ProjectionError",
    "ShapeError",
    "BandNotFoundError",
    "BandTransformNotInvertibleError",
    "MetadataKeyNotFoundError",
    "MultipleProjectionsError"
]

class RasterError(Exception):
    """Base class for all s2array errors."""

class RasterIOError(RasterError):
    """The raster library failed to open, read or describe a dataset."""

class ProjectionError(RasterError):
    """A coordinate reference system could not be created or interpreted."""

class ShapeError(RasterError):
    """The output array could not be allocated with the requested shape."""

class BandNotFoundError(RasterError):
    """A requested band name is not present in the product."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Band `{name}` not found.")

class BandTransformNotInvertibleError(RasterError):
    """A band carries a singular geo-transform and cannot be resampled."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Band `{name}` has a non invertible geo transform.")

class MetadataKeyNotFoundError(RasterError):
    """A metadata key required during discovery is missing."""

    def __init__(self, dataset_path: str, key: str):
        self.dataset_path = dataset_path
        self.key = key
        super().__init__(f"Couldn't find metadata key {key} in dataset {dataset_path}.")

class MultipleProjectionsError(RasterError):
    """The retained bands of a product do not share a single CRS."""

    def __init__(self, path: str, projections=None):
        self.path = path
        self.projections = sorted(projections or [])
        super().__init__(
            f"Dataset {path} does not have exactly one projection "
            f"(found {len(self.projections)})."
        )
