# tests/unit/test_resources_config.py

from types import SimpleNamespace

import numpy as np
import pytest

from s2array import resources
from s2array.config import ReaderConfig
from s2array.exceptions import ShapeError

def test_small_cube_is_safe():
    estimate = resources.estimate_cube_memory((3, 16, 16), np.uint16, min_free_gb=0.0)

    assert estimate.total_required_bytes == 3 * 16 * 16 * 2 * 2
    assert estimate.is_safe

def test_allocate_cube_zero_filled():
    cube = resources.allocate_cube((2, 4, 3), min_free_gb=0.0)

    assert cube.shape == (2, 4, 3)
    assert cube.dtype == np.uint16
    assert not cube.any()

def test_allocate_cube_refuses_when_memory_is_short(monkeypatch):
    monkeypatch.setattr(
        resources.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(available=1024)
    )

    with pytest.raises(ShapeError):
        resources.allocate_cube((3, 1000, 1000), min_free_gb=0.0)

def test_allocate_small_cube_on_low_memory_host(monkeypatch):
    monkeypatch.setattr(
        resources.psutil,
        "virtual_memory",
        lambda: SimpleNamespace(available=64 * 1024**2)
    )

    cube = resources.allocate_cube((1, 1, 1), min_free_gb=ReaderConfig().min_free_gb)

    assert cube.shape == (1, 1, 1)

def test_allocate_cube_rejects_negative_shape():
    with pytest.raises(ShapeError):
        resources.allocate_cube((1, -1, 4))

def test_config_defaults():
    config = ReaderConfig()

    assert config.max_workers is None
    assert config.skip_patterns == ("TCI",)
    assert config.band_name_key == "BANDNAME"
    assert config.min_free_gb == 0.0
    assert config.skips("SENTINEL2_L2A:MTD.xml:TCI:EPSG_32633")
    assert not config.skips("SENTINEL2_L2A:MTD.xml:10m:EPSG_32633")

def test_config_rejects_zero_workers():
    with pytest.raises(ValueError):
        ReaderConfig(max_workers=0)

def test_config_from_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("S2ARRAY_MAX_WORKERS", "3")
    monkeypatch.setenv("S2ARRAY_SKIP_PATTERNS", "TCI, PVI")

    config = ReaderConfig.from_env()

    assert config.max_workers == 3
    assert config.skip_patterns == ("TCI", "PVI")

def test_config_from_env_overrides_win(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("S2ARRAY_MAX_WORKERS", "3")

    config = ReaderConfig.from_env(max_workers=1)

    assert config.max_workers == 1

def test_config_from_dotenv_file(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    # record the variable so the value loaded from .env is removed on teardown
    monkeypatch.setenv("S2ARRAY_MAX_WORKERS", "1")
    monkeypatch.delenv("S2ARRAY_MAX_WORKERS")
    (tmp_path / ".env").write_text("S2ARRAY_MAX_WORKERS=5\n")

    config = ReaderConfig.from_env()

    assert config.max_workers == 5
