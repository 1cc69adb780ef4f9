# img2map/convert.py
from __future__ import annotations

"""
Image -> map pipelines.

Exports:
- convert_image(input_path, classifier, ...)     -> ConversionResult
- convert_directory(input_dir, classifier, ...)  -> BatchReport
- list_images(input_dir)                         -> [Path, ...]
- default_output_path(input_path)                -> Path

Per file: load -> optional resize -> classify into a grid -> write.
In directory mode a file that fails to decode or write is recorded and the
batch continues; fatal errors (palette, template, directories) abort it.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .classify import Classifier, pack_rgba
from .core_types import TileGrid
from .errors import DirectoryError, Img2MapError, WriteError
from .grid import build_tile_grid, tile_usage
from .image_io import is_image_path, load_image_rgba, preprocess

MapWriter = Callable[[TileGrid, Path], Path]

MAP_SUFFIX = ".map"


@dataclass(frozen=True)
class ConversionResult:
    input_path: Path
    output_path: Path
    source_size: Tuple[int, int]  # (W, H)
    grid_size: Tuple[int, int]  # (W, H)
    unique_colors: int
    usage: List[Tuple[int, int]]
    seconds: float
    grid: TileGrid = field(repr=False, compare=False)


@dataclass(frozen=True)
class FileFailure:
    path: Path
    error: Img2MapError


@dataclass
class BatchReport:
    output_dir: Path
    converted: List[ConversionResult] = field(default_factory=list)
    failed: List[FileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def default_output_path(input_path: Path) -> Path:
    return Path(input_path).with_suffix(MAP_SUFFIX)


def _default_writer() -> MapWriter:
    # twmap is only needed once a map is actually written
    from .map_writer import write_map

    return write_map


def convert_image(
    input_path: Path,
    classifier: Classifier,
    *,
    tile_size: int = 1,
    resize_filter: str = "nearest",
    output_path: Optional[Path] = None,
    writer: Optional[MapWriter] = None,
) -> ConversionResult:
    """Convert one image end-to-end and write the map."""
    t_start = time.perf_counter()
    input_path = Path(input_path)
    if output_path is None:
        output_path = default_output_path(input_path)
    if writer is None:
        writer = _default_writer()

    rgba_in = load_image_rgba(input_path)
    H0, W0 = rgba_in.shape[0], rgba_in.shape[1]

    rgba = preprocess(rgba_in, tile_size, resize_filter)
    H, W = rgba.shape[0], rgba.shape[1]

    grid = build_tile_grid(rgba, classifier)
    unique_colors = int(np.unique(pack_rgba(rgba.reshape(-1, 4))).shape[0])

    written = writer(grid, Path(output_path))

    return ConversionResult(
        input_path=input_path,
        output_path=Path(written),
        source_size=(W0, H0),
        grid_size=(W, H),
        unique_colors=unique_colors,
        usage=tile_usage(grid),
        seconds=time.perf_counter() - t_start,
        grid=grid,
    )


def list_images(input_dir: Path) -> List[Path]:
    """Recognised image files directly inside input_dir, sorted by name."""
    input_dir = Path(input_dir)
    try:
        entries = list(input_dir.iterdir())
    except OSError as exc:
        raise DirectoryError(f"cannot read input directory {input_dir}: {exc}") from exc
    files = [p for p in entries if is_image_path(p)]
    files.sort(key=lambda p: p.name.lower())
    return files


def _prepare_output_dir(output_dir: Path) -> None:
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryError(f"cannot create output directory {output_dir}: {exc}") from exc


def convert_directory(
    input_dir: Path,
    classifier: Classifier,
    *,
    output_dir: Optional[Path] = None,
    tile_size: int = 1,
    resize_filter: str = "nearest",
    jobs: int = 1,
    writer: Optional[MapWriter] = None,
    on_result: Optional[Callable[[ConversionResult], None]] = None,
    on_failure: Optional[Callable[[FileFailure], None]] = None,
) -> BatchReport:
    """
    Convert every recognised image in input_dir.

    Results and failures are reported through the callbacks in file order,
    including when jobs > 1.
    """
    input_dir = Path(input_dir)
    out_dir = Path(output_dir) if output_dir is not None else input_dir
    files = list_images(input_dir)
    _prepare_output_dir(out_dir)
    if writer is None:
        writer = _default_writer()

    report = BatchReport(output_dir=out_dir)

    # first file in name order owns an output name; later ones would overwrite it
    owner: Dict[str, Path] = {}
    for p in files:
        owner.setdefault(Path(p.name).with_suffix(MAP_SUFFIX).name.lower(), p)

    def _one(path: Path) -> ConversionResult:
        out_path = out_dir / Path(path.name).with_suffix(MAP_SUFFIX)
        first = owner[out_path.name.lower()]
        if first != path:
            raise WriteError(
                f"{out_path.name} is already written from {first.name}; skipping {path.name}"
            )
        return convert_image(
            path,
            classifier,
            tile_size=tile_size,
            resize_filter=resize_filter,
            output_path=out_path,
            writer=writer,
        )

    def _collect(path: Path, produce: Callable[[], ConversionResult]) -> None:
        try:
            result = produce()
        except Img2MapError as exc:
            if exc.fatal:
                raise
            failure = FileFailure(path, exc)
            report.failed.append(failure)
            if on_failure is not None:
                on_failure(failure)
            return
        report.converted.append(result)
        if on_result is not None:
            on_result(result)

    if jobs <= 1:
        for p in files:
            _collect(p, lambda p=p: _one(p))
        return report

    with ThreadPoolExecutor(max_workers=jobs) as ex:
        futures = [(p, ex.submit(_one, p)) for p in files]
        try:
            for p, fut in futures:
                _collect(p, fut.result)
        except BaseException:
            for _p, fut in futures:
                fut.cancel()
            raise
    return report


__all__ = [
    "MapWriter",
    "MAP_SUFFIX",
    "ConversionResult",
    "FileFailure",
    "BatchReport",
    "default_output_path",
    "convert_image",
    "list_images",
    "convert_directory",
]
