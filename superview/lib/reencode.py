"""Drive ffmpeg through the remap filter and stream its progress output."""

import logging
import subprocess
import sys
from pathlib import Path
from typing import Callable, Optional

from pydantic import BaseModel, ConfigDict

from superview.errors import SpawnFailed, TranscodeFailed

logger = logging.getLogger("superview.reencode")

OUT_TIME_MS = "out_time_ms="
FILTER_CHAIN = "remap,format=yuv444p,format=yuv420p"


class TranscodeJob(BaseModel):
    model_config = ConfigDict(frozen=True)

    input_path: Path
    output_path: Path
    x_map_path: Path
    y_map_path: Path
    codec_name: str
    bitrate: int
    duration: float


def build_command(job: TranscodeJob, ffmpeg: str = "ffmpeg") -> list:
    return [
        ffmpeg,
        "-hide_banner",
        "-progress", "pipe:1",
        "-loglevel", "panic",
        "-y",
        "-re",
        "-i", str(job.input_path),
        "-f", "pgm_pipe",
        "-i", str(job.x_map_path),
        "-f", "pgm_pipe",
        "-i", str(job.y_map_path),
        "-filter_complex", FILTER_CHAIN,
        "-c:v", job.codec_name,
        "-b:v", str(job.bitrate),
        "-c:a", "copy",
        "-x265-params", "log-level=error",
        str(job.output_path),
    ]


def parse_progress(line: str, duration: float) -> Optional[float]:
    """Percent complete for an ``out_time_ms=`` progress line, else None.

    ffmpeg's out_time_ms is in microseconds. A value that is not a number
    (ffmpeg writes ``N/A`` before the first frame) reads as 0.
    """
    line = line.rstrip("\r\n")
    if not line.startswith(OUT_TIME_MS):
        return None
    try:
        elapsed_us = float(line[len(OUT_TIME_MS):])
    except ValueError:
        elapsed_us = 0.0
    if duration <= 0:
        return 0.0
    return elapsed_us / (duration * 10_000)


def print_progress(percent: float):
    """Overwrite the current stderr line with the encoding progress."""
    sys.stderr.write(f"\rEncoding progress: {percent:.2f}%")
    sys.stderr.flush()


def reencode(
    job: TranscodeJob,
    ffmpeg: str = "ffmpeg",
    on_progress: Optional[Callable[[float], None]] = None,
):
    """Run ffmpeg for ``job``, reporting progress until its stdout closes.

    Raises SpawnFailed if ffmpeg cannot be started and TranscodeFailed if it
    exits non-zero. Nothing is retried.
    """
    report = on_progress or print_progress
    cmd = build_command(job, ffmpeg)
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        proc = subprocess.Popen(
            cmd,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
        )
    except OSError as e:
        raise SpawnFailed(ffmpeg, e) from e

    try:
        for line in proc.stdout:
            percent = parse_progress(line, job.duration)
            if percent is not None:
                report(percent)
    except (OSError, UnicodeDecodeError) as e:
        # Progress is best-effort; a broken stream just ends reporting.
        logger.debug(f"Stopped reading ffmpeg progress: {e}")
    finally:
        proc.stdout.close()

    if on_progress is None:
        sys.stderr.write("\n")

    status = proc.wait()
    if status != 0:
        raise TranscodeFailed(status)
