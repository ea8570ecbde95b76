# src/s2array/resources.py

"""
This module checks that an output cube fits in memory before it is allocated.

read_bands materialises the whole requested window at once, so the estimate
accounts for the output cube plus the per-band source windows read to fill it.
"""

import logging
from dataclasses import dataclass
from typing import Tuple

import numpy as np
import psutil

from .exceptions import ShapeError

log = logging.getLogger(__name__)

__all__ = [
    "DEFAULT_SAFETY_FACTOR",
    "MIN_FREE_GB",
    "MemoryEstimate",
    "estimate_cube_memory",
    "allocate_cube"
]

DEFAULT_SAFETY_FACTOR = 2.0
MIN_FREE_GB = 0.0

@dataclass(frozen=True)
class MemoryEstimate:
    """
    Estimation of memory requirements for an output cube.

    Args:
        total_required_bytes: Bytes required (cube size times safety factor)
        available_system_bytes: Currently available system memory in bytes
        is_safe: True if the allocation is considered safe
        reason: Human readable summary of the estimate
    """
    total_required_bytes: int
    available_system_bytes: int
    is_safe: bool
    reason: str

def estimate_cube_memory(
    shape: Tuple[int, ...],
    dtype=np.uint16,
    safety_factor: float = DEFAULT_SAFETY_FACTOR,
    min_free_gb: float = MIN_FREE_GB
) -> MemoryEstimate:
    """
    Check whether an array of `shape` and `dtype` fits in available RAM.

    Args:
        shape: Requested array shape.
        dtype: Requested numpy dtype.
        safety_factor: Multiplier covering source windows and index arrays.
        min_free_gb: Memory to leave available after the allocation.

    Returns:
        MemoryEstimate: Required bytes, available bytes and the verdict.
    """
    raw_bytes = int(np.prod(shape, dtype=np.int64)) * np.dtype(dtype).itemsize
    total_required = int(raw_bytes * safety_factor)

    mem = psutil.virtual_memory()
    min_free_bytes = int(min_free_gb * (1024**3))
    is_safe = (total_required + min_free_bytes) <= mem.available

    reason = f"Req: {total_required/1e9:.2f}GB, Avail: {mem.available/1e9:.2f}GB"

    return MemoryEstimate(total_required, mem.available, is_safe, reason)

def allocate_cube(
    shape: Tuple[int, ...],
    dtype=np.uint16,
    safety_factor: float = DEFAULT_SAFETY_FACTOR,
    min_free_gb: float = MIN_FREE_GB
) -> np.ndarray:
    """
    Allocate a zero-filled array after checking it fits in memory.

    Raises:
        ShapeError: If the shape is invalid or the array does not fit.
    """
    if any(dim < 0 for dim in shape):
        raise ShapeError(f"Invalid output shape {shape}")

    estimate = estimate_cube_memory(shape, dtype, safety_factor, min_free_gb)
    if not estimate.is_safe:
        raise ShapeError(f"Output of shape {shape} does not fit in memory. {estimate.reason}")

    log.debug(f"Allocating output {shape}: {estimate.reason}")

    try:
        return np.zeros(shape, dtype=dtype)
    except MemoryError as e:
        raise ShapeError(f"Failed to allocate output of shape {shape}: {e}") from e
