"""Superview remap filters -- X/Y lookup tables written as plain-text PGM.

ffmpeg's ``remap`` filter samples, for every destination pixel, the source
pixel named by the X and Y maps. The X map stretches the frame horizontally,
pulling the sides in more than the centre (offset grows with the squared
distance from the centre column). The Y map is a row passthrough.
"""

import logging
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np
from pydantic import BaseModel, ConfigDict, Field

from superview.errors import FilterCreateError, FilterFlushError, FilterWriteError

logger = logging.getLogger("superview.filters")

PGM_MAXVAL = 65535


class FilterConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_width: int = Field(ge=0)
    source_height: int = Field(ge=0)
    target_width: int = Field(ge=0)

    @classmethod
    def for_stream(cls, width: int, height: int) -> "FilterConfig":
        """Geometry for widening a 4:3 frame to 16:9, target width kept even."""
        target_width = int(width / (4.0 / 3.0) * (16.0 / 9.0)) // 2 * 2
        return cls(source_width=width, source_height=height, target_width=target_width)


def x_map_row(config: FilterConfig) -> np.ndarray:
    """Source column for every destination column (identical for every row).

    Values are truncated toward zero and may fall outside the source frame;
    ffmpeg clamps them.
    """
    target_width = config.target_width
    half_spread = float(target_width - config.source_width) / 2.0

    x = np.arange(target_width, dtype=np.float64)
    tx = (x / target_width - 0.5) * 2.0
    sx = x - half_spread
    offset = tx * tx * half_spread
    offset = np.where(tx < 0.0, -offset, offset)
    return np.trunc(sx - offset).astype(np.int64)


def generate(config: FilterConfig) -> Tuple[np.ndarray, np.ndarray]:
    """Return the (x_map, y_map) grids, each source_height x target_width."""
    shape = (config.source_height, config.target_width)
    x_map = np.broadcast_to(x_map_row(config), shape).copy()
    y_map = np.broadcast_to(
        np.arange(config.source_height, dtype=np.int64)[:, np.newaxis], shape
    ).copy()
    return x_map, y_map


def format_header(config: FilterConfig) -> str:
    return f"P2 {config.target_width} {config.source_height} {PGM_MAXVAL}\n"


def format_row(values: Iterable[int]) -> str:
    return "".join(f"{int(v)} " for v in values) + "\n"


def _x_lines(config: FilterConfig) -> Iterator[str]:
    line = format_row(x_map_row(config))
    for _ in range(config.source_height):
        yield line


def _y_lines(config: FilterConfig) -> Iterator[str]:
    for y in range(config.source_height):
        yield f"{y} " * config.target_width + "\n"


def _create_filter_file(directory: Optional[Path]):
    try:
        return tempfile.NamedTemporaryFile(
            mode="w", encoding="ascii", newline="\n",
            prefix="superview_", suffix=".pgm",
            dir=directory, delete=False,
        )
    except OSError as e:
        raise FilterCreateError(e) from e


def _write_lines(handle, header: str, lines: Iterable[str]):
    try:
        handle.write(header)
        for line in lines:
            handle.write(line)
    except OSError as e:
        raise FilterWriteError(handle.name, e) from e


def _flush_and_close(handle):
    try:
        handle.close()
    except OSError as e:
        raise FilterFlushError(handle.name, e) from e


@contextmanager
def write_filters(config: FilterConfig, directory: Optional[Path] = None):
    """Write both maps to temporary .pgm files and yield (x_path, y_path).

    The files are closed before they are yielded so another process can
    read them, and are removed when the block exits, on success or failure.
    """
    handles = []
    try:
        handles.append(_create_filter_file(directory))
        handles.append(_create_filter_file(directory))
        x_handle, y_handle = handles

        header = format_header(config)
        _write_lines(x_handle, header, _x_lines(config))
        _write_lines(y_handle, header, _y_lines(config))
        for handle in handles:
            _flush_and_close(handle)

        logger.debug(f"Filter maps written to {x_handle.name} and {y_handle.name}")
        yield Path(x_handle.name), Path(y_handle.name)
    finally:
        for handle in handles:
            if not handle.closed:
                handle.close()
            Path(handle.name).unlink(missing_ok=True)
