# src/s2array/config.py

"""
This module holds the reader configuration.
"""

import logging
import os
from typing import Optional, Tuple

from dotenv import find_dotenv, load_dotenv

from .band import BAND_NAME_KEY
from .resources import DEFAULT_SAFETY_FACTOR, MIN_FREE_GB

log = logging.getLogger(__name__)

__all__ = [
    "ReaderConfig"
]

class ReaderConfig:
    """Configuration object for product discovery and band reads.

    Args:
        max_workers: Thread pool size for parallel subdataset parsing and band
            reads. None lets concurrent.futures pick a default.
        skip_patterns: Subdatasets whose identifier contains any of these
            substrings are ignored. Default=("TCI",).
        band_name_key: Band metadata key holding the band name. Default="BANDNAME".
        memory_safety_factor: Multiplier applied to the output size before the
            memory check. Default=2.0.
        min_free_gb: Memory to keep available after allocating the output. Default=0.0.
    """
    def __init__(
        self,
        max_workers: Optional[int] = None,
        skip_patterns: Tuple[str, ...] = ("TCI",),
        band_name_key: str = BAND_NAME_KEY,
        memory_safety_factor: float = DEFAULT_SAFETY_FACTOR,
        min_free_gb: float = MIN_FREE_GB
    ):
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be a positive integer, got {max_workers}")

        self.max_workers = max_workers
        self.skip_patterns = tuple(skip_patterns)
        self.band_name_key = band_name_key
        self.memory_safety_factor = memory_safety_factor
        self.min_free_gb = min_free_gb

    def skips(self, subdataset_path: str) -> bool:
        return any(pattern in subdataset_path for pattern in self.skip_patterns)

    @classmethod
    def from_env(cls, **overrides) -> "ReaderConfig":
        """
        Build a configuration from S2ARRAY_* environment variables.

        A .env file is loaded first when one is found. Explicit keyword
        arguments take precedence over the environment.

        Variables:
            S2ARRAY_MAX_WORKERS: integer thread pool size.
            S2ARRAY_SKIP_PATTERNS: comma separated substrings.
            S2ARRAY_BAND_NAME_KEY: band metadata key.
            S2ARRAY_MIN_FREE_GB: float.
        """
        env_path = find_dotenv(usecwd=True)
        if env_path:
            load_dotenv(env_path)
            log.debug(f"Loaded environment from {env_path}")

        kwargs = {}
        max_workers = os.getenv("S2ARRAY_MAX_WORKERS")
        if max_workers:
            kwargs["max_workers"] = int(max_workers)

        skip_patterns = os.getenv("S2ARRAY_SKIP_PATTERNS")
        if skip_patterns is not None:
            kwargs["skip_patterns"] = tuple(p.strip() for p in skip_patterns.split(",") if p.strip())

        band_name_key = os.getenv("S2ARRAY_BAND_NAME_KEY")
        if band_name_key:
            kwargs["band_name_key"] = band_name_key

        min_free_gb = os.getenv("S2ARRAY_MIN_FREE_GB")
        if min_free_gb:
            kwargs["min_free_gb"] = float(min_free_gb)

        kwargs.update(overrides)
        return cls(**kwargs)

    def __repr__(self) -> str:
        return (
            f"ReaderConfig(max_workers={self.max_workers}, skip_patterns={self.skip_patterns}, "
            f"band_name_key={self.band_name_key!r})"
        )
