import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import numpy as np

from .config import ReaderConfig
from .exceptions import RasterError
from .raster import Raster

def setup_logging(level: int = logging.INFO) -> None:
    """
    Configures the standard logging format and level for the command-line interface.

    Args:
        level (int): The logging threshold level.
    """
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

def show_info(raster: Raster) -> None:
    """
    Prints the CRS, reference resolution and band index of an opened product.

    Args:
        raster (Raster): The product to describe.
    """
    crs_line = raster.crs.splitlines()[0] if raster.crs else "<none>"
    print(f"Product:    {raster.path}")
    print(f"CRS:        {crs_line[:80]}")
    print(f"Resolution: {raster.reference_resolution}m")
    print("Bands:")
    for name, res in raster.resolutions().items():
        band = raster.band(name)
        print(f"  {name:<6} {res:>3}m  band {band.index} of {band.subdataset_path}")

def read_to_file(
    raster: Raster,
    bands: List[str],
    offset: List[int],
    size: List[int],
    output: Path
) -> Path:
    """
    Reads a resampled window of several bands and stores it as a NumPy .npy file.

    Args:
        raster (Raster): The product to read from.
        bands (List[str]): Band names in output order.
        offset (List[int]): Column and row of the window origin in the reference grid.
        size (List[int]): Width and height of the window in reference pixels.
        output (Path): Destination .npy file.

    Returns:
        Path: The written file.
    """
    cube = raster.read_bands(bands, tuple(offset), tuple(size))
    output.parent.mkdir(parents=True, exist_ok=True)
    np.save(output, cube)
    logging.info(f"Saved cube {cube.shape} → {output}")
    return output

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="s2array",
        description="Windowed multi-resolution band reader for Sentinel-2 products"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Thread pool size for parallel reads. Defaults to S2ARRAY_MAX_WORKERS or Python's default."
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enables debug logging."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser(
        "info",
        help="Lists the bands, resolutions and CRS of a product."
    )
    info_parser.add_argument("path", type=str, help="Product path (SAFE directory, MTD xml or zip).")

    read_parser = subparsers.add_parser(
        "read",
        help="Reads a window of several bands on the finest band grid."
    )
    read_parser.add_argument("path", type=str, help="Product path (SAFE directory, MTD xml or zip).")
    read_parser.add_argument(
        "--bands",
        nargs="+",
        required=True,
        help="Band names in output order, e.g. B4 B3 B2."
    )
    read_parser.add_argument(
        "--offset",
        nargs=2,
        type=int,
        default=[0, 0],
        metavar=("COL", "ROW"),
        help="Window origin in the reference grid. Defaults to 0 0."
    )
    read_parser.add_argument(
        "--size",
        nargs=2,
        type=int,
        required=True,
        metavar=("WIDTH", "HEIGHT"),
        help="Window size in reference pixels."
    )
    read_parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Destination .npy file."
    )
    return parser

def main(argv: Optional[List[str]] = None) -> int:
    """
    Parses command-line arguments and routes execution to the requested command.
    """
    args = build_parser().parse_args(argv)
    setup_logging(logging.DEBUG if args.verbose else logging.INFO)

    overrides = {"max_workers": args.workers} if args.workers is not None else {}

    try:
        config = ReaderConfig.from_env(**overrides)
        raster = Raster.open(args.path, config)

        if args.command == "info":
            show_info(raster)
        elif args.command == "read":
            read_to_file(raster, args.bands, args.offset, args.size, args.output)

    except (RasterError, ValueError) as e:
        logging.error(f"{args.command} failed: {e}")
        return 1

    return 0

if __name__ == "__main__":
    sys.exit(main())
