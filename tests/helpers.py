# tests/helpers.py

import warnings

import numpy as np
import rasterio
from rasterio.errors import NotGeoreferencedWarning
from rasterio.transform import Affine
from rasterio.crs import CRS

ORIGIN = (300000.0, 5000000.0)
EXTENT_M = 80

def native_values(width: int, height: int, shift: int = 0) -> np.ndarray:
    """Pixel value = 10 * col + row (+ shift), laid out as (rows, cols)."""
    rows, cols = np.indices((height, width))
    return (10 * cols + rows + shift).astype(np.uint16)

def write_subdataset(path, band_names, resolution, crs="EPSG:32633", shift=0):
    """
    Writes a GeoTIFF holding one band per name, all at `resolution` metres.
    A None name leaves the band without BANDNAME metadata.
    """
    size = EXTENT_M // resolution
    transform = Affine(resolution, 0.0, ORIGIN[0], 0.0, -resolution, ORIGIN[1])

    profile = {
        'driver': 'GTiff',
        'height': size,
        'width': size,
        'count': len(band_names),
        'dtype': 'uint16',
        'crs': CRS.from_string(crs),
        'transform': transform
    }

    with rasterio.open(path, 'w', **profile) as dst:
        for idx, name in enumerate(band_names, start=1):
            dst.write(native_values(size, size, shift), idx)
            if name is not None:
                dst.update_tags(idx, BANDNAME=name, RESOLUTION=str(resolution))

    return str(path)

def write_ungeoreferenced_subdataset(path, band_name, size=8):
    """
    Writes a GeoTIFF with one named band but no CRS and no geo-transform.
    """
    profile = {
        'driver': 'GTiff',
        'height': size,
        'width': size,
        'count': 1,
        'dtype': 'uint16'
    }

    with warnings.catch_warnings():
        warnings.simplefilter("ignore", NotGeoreferencedWarning)
        with rasterio.open(path, 'w', **profile) as dst:
            dst.write(native_values(size, size), 1)
            dst.update_tags(1, BANDNAME=band_name)

    return str(path)

def write_product(path, subdataset_paths, metadata=None):
    """
    Writes a VRT whose SUBDATASETS metadata domain lists the given datasets,
    the same layout GDAL exposes for a Sentinel-2 SAFE product.
    """
    metadata = metadata or {}
    default_items = "\n".join(
        f'    <MDI key="{key}">{value}</MDI>' for key, value in metadata.items()
    )
    subdataset_items = "\n".join(
        f'    <MDI key="SUBDATASET_{i}_NAME">{sub}</MDI>\n'
        f'    <MDI key="SUBDATASET_{i}_DESC">Subdataset {i}</MDI>'
        for i, sub in enumerate(subdataset_paths, start=1)
    )

    path.write_text(
        '<VRTDataset rasterXSize="1" rasterYSize="1">\n'
        f'  <GeoTransform>{ORIGIN[0]}, 10.0, 0.0, {ORIGIN[1]}, 0.0, -10.0</GeoTransform>\n'
        '  <Metadata>\n'
        f'{default_items}\n'
        '  </Metadata>\n'
        '  <Metadata domain="SUBDATASETS">\n'
        f'{subdataset_items}\n'
        '  </Metadata>\n'
        '  <VRTRasterBand dataType="UInt16" band="1"/>\n'
        '</VRTDataset>\n'
    )
    return str(path)

def expected_plane(offset, size, scale: int = 1, shift: int = 0) -> np.ndarray:
    """
    Values read_bands should return for a band written by write_subdataset,
    indexed [x, y]. `scale` is the band pixel size over the reference pixel size.
    """
    xs, ys = np.meshgrid(
        np.arange(offset[0], offset[0] + size[0]),
        np.arange(offset[1], offset[1] + size[1]),
        indexing="ij"
    )
    return (10 * (xs // scale) + ys // scale + shift).astype(np.uint16)

def assert_same_index(r1, r2):
    """Two opened products expose the same bands, resolutions and CRS."""
    assert r1.band_names() == r2.band_names()
    assert r1.resolutions() == r2.resolutions()
    assert r1.crs == r2.crs
    assert r1.reference_transform == r2.reference_transform
