"""FFprobe wrapper -- probe the first video stream into a StreamSpec."""

import json
import logging
import re
import subprocess
from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, ValidationError, field_validator

from superview.errors import ProbeFailed, ProbeParseError

logger = logging.getLogger("superview.ffprobe")

# ffprobe reports duration and bit_rate as text; parse them without locale rules.
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_UINT_RE = re.compile(r"\+?[0-9]+")


class StreamSpec(BaseModel):
    """Metadata of the first video stream, as reported by ffprobe."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    codec_name: str
    width: StrictInt = Field(ge=0)
    height: StrictInt = Field(ge=0)
    duration: float
    bitrate: int = Field(alias="bit_rate", ge=0)

    @field_validator("duration", mode="before")
    @classmethod
    def _parse_duration(cls, value):
        if isinstance(value, str):
            if not _DECIMAL_RE.fullmatch(value):
                raise ValueError(f"invalid decimal number {value!r}")
            return float(value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"expected a number, got {value!r}")
        return value

    @field_validator("bitrate", mode="before")
    @classmethod
    def _parse_bitrate(cls, value):
        if isinstance(value, str):
            if not _UINT_RE.fullmatch(value):
                raise ValueError(f"invalid integer {value!r}")
            return int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"expected an integer, got {value!r}")
        return value


def build_probe_command(path: Union[str, Path], ffprobe: str = "ffprobe") -> list:
    return [
        ffprobe,
        "-i", str(path),
        "-v", "error",
        "-select_streams", "v:0",
        "-show_entries", "stream=codec_name,width,height,duration,bit_rate",
        "-print_format", "json",
    ]


def probe(path: Union[str, Path], ffprobe: str = "ffprobe") -> StreamSpec:
    """Run ffprobe on ``path`` and return the first video stream.

    Raises ProbeFailed if ffprobe cannot be started or exits non-zero, and
    ProbeParseError if its output is not the expected JSON document. Any
    streams after the first are ignored.
    """
    path = Path(path)
    cmd = build_probe_command(path, ffprobe)
    logger.debug(f"Running {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True)
    except OSError as e:
        raise ProbeFailed(ffprobe, cause=e) from e

    if result.returncode != 0:
        raise ProbeFailed(ffprobe, exit_status=result.returncode)

    return parse_probe_output(path, result.stdout)


def parse_probe_output(path: Path, stdout: bytes) -> StreamSpec:
    """Decode ffprobe's JSON output into a StreamSpec."""
    try:
        data = json.loads(stdout.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ProbeParseError(path, e) from e

    streams = data.get("streams") if isinstance(data, dict) else None
    if not streams:
        raise ProbeParseError(path, ValueError("no video stream reported"))

    try:
        return StreamSpec.model_validate(streams[0])
    except ValidationError as e:
        raise ProbeParseError(path, e) from e
