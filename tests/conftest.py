# tests/conftest.py

import pytest

from helpers import write_subdataset, write_product, write_ungeoreferenced_subdataset

@pytest.fixture
def product_path(tmp_path):
    """
    Fixture: synthetic product with B2, B3 at 10 m and B4 at 20 m, plus a
    TCI composite that must be ignored.
    """
    sub_10m = write_subdataset(tmp_path / "R10m.tif", ["B2", "B3"], 10)
    sub_20m = write_subdataset(tmp_path / "R20m.tif", ["B4"], 20)
    sub_tci = write_subdataset(tmp_path / "TCI_10m.tif", ["TCI_R", "TCI_G", "TCI_B"], 10)

    return write_product(
        tmp_path / "product.vrt",
        [sub_10m, sub_20m, sub_tci],
        metadata={"PRODUCT_TYPE": "S2MSI2A", "SPACECRAFT_NAME": "Sentinel-2B"}
    )

@pytest.fixture
def duplicated_band_product(tmp_path):
    """
    Fixture: B2 appears at 20 m (listed first, values shifted by 1000) and
    at 10 m.
    """
    sub_20m = write_subdataset(tmp_path / "R20m.tif", ["B2", "B4"], 20, shift=1000)
    sub_10m = write_subdataset(tmp_path / "R10m.tif", ["B2", "B3"], 10)

    return write_product(tmp_path / "product.vrt", [sub_20m, sub_10m])

@pytest.fixture
def mixed_crs_product(tmp_path):
    sub_10m = write_subdataset(tmp_path / "R10m.tif", ["B2"], 10, crs="EPSG:32633")
    sub_20m = write_subdataset(tmp_path / "R20m.tif", ["B4"], 20, crs="EPSG:32634")

    return write_product(tmp_path / "product.vrt", [sub_10m, sub_20m])

@pytest.fixture
def unnamed_band_product(tmp_path):
    sub_10m = write_subdataset(tmp_path / "R10m.tif", ["B2", None], 10)

    return write_product(tmp_path / "product.vrt", [sub_10m])

@pytest.fixture
def ungeoreferenced_product(tmp_path):
    """
    Fixture: a valid 10 m subdataset next to one that carries no
    geo-transform at all.
    """
    sub_10m = write_subdataset(tmp_path / "R10m.tif", ["B3"], 10)
    sub_bare = write_ungeoreferenced_subdataset(tmp_path / "bare.tif", "B2")

    return write_product(tmp_path / "product.vrt", [sub_10m, sub_bare])
