"""Superview driver -- open, probe, build the remap filters, re-encode."""

import functools
import logging
import time
from pathlib import Path
from typing import Callable, Optional, Union

from superview.errors import CodecListError, ConfigError, InvalidUtf8Error, OpenInputError
from superview.lib.encoding import codec_support
from superview.lib.ffprobe import StreamSpec, probe
from superview.lib.filters import FilterConfig, write_filters
from superview.lib.paths import get_config_path, resolve_tool
from superview.lib.reencode import TranscodeJob, reencode

logger = logging.getLogger("superview")

Prober = Callable[[Path], StreamSpec]
Engine = Callable[[TranscodeJob], None]


def load_config(path: Optional[str] = None) -> dict:
    """Load config.toml; a missing file means all defaults."""
    config_path = get_config_path(path)
    if not config_path.exists():
        logger.debug(f"No config file at {config_path}, using defaults")
        return {}
    try:
        import tomli
    except ImportError:
        import tomllib as tomli
    try:
        with open(config_path, "rb") as f:
            return tomli.load(f)
    except (OSError, tomli.TOMLDecodeError) as e:
        raise ConfigError(config_path, e) from e


def show_codec_support(ffmpeg: str, required: bool = True):
    """Log whether the ffmpeg build lists H.264 and H.265."""
    try:
        support = codec_support(ffmpeg)
    except (CodecListError, InvalidUtf8Error) as e:
        if required:
            raise
        logger.warning(f"Skipping codec diagnostics: {e}")
        return
    for codec, supported in support.items():
        logger.info(f"{codec} supported: {supported}")


def superview(
    input_path: Union[str, Path],
    output_path: Union[str, Path] = "output.mp4",
    bitrate: Optional[int] = None,
    config: Optional[dict] = None,
    prober: Optional[Prober] = None,
    engine: Optional[Engine] = None,
) -> Path:
    """Convert ``input_path`` to a superview-scaled ``output_path``.

    Args:
        input_path: Source video.
        output_path: Destination video, overwritten if it exists.
        bitrate: Video bitrate passed to ffmpeg. Defaults to the input's.
        config: Parsed config.toml. Loaded from disk if None.
        prober: Replacement for ffprobe (Path -> StreamSpec).
        engine: Replacement for the ffmpeg run (TranscodeJob -> None).

    Returns:
        The output path.
    """
    input_path = Path(input_path)
    output_path = Path(output_path)
    if config is None:
        config = load_config()

    # Fail fast before any external tool runs
    try:
        with open(input_path, "rb"):
            pass
    except OSError as e:
        raise OpenInputError(input_path, e) from e

    diagnostics = config.get("diagnostics", {})
    if diagnostics.get("show_codec_support", True):
        show_codec_support(
            resolve_tool(config, "ffmpeg"),
            required=diagnostics.get("codec_listing_required", True),
        )

    if prober is None:
        prober = functools.partial(probe, ffprobe=resolve_tool(config, "ffprobe"))
    if engine is None:
        engine = functools.partial(reencode, ffmpeg=resolve_tool(config, "ffmpeg"))

    start = time.time()
    stream = prober(input_path)
    if bitrate is None:
        bitrate = stream.bitrate
    filter_config = FilterConfig.for_stream(stream.width, stream.height)

    logger.info(
        f"Scaling input file {input_path} (codec: {stream.codec_name}, "
        f"duration: {int(stream.duration)} secs) from "
        f"{filter_config.source_width}*{filter_config.source_height} to "
        f"{filter_config.target_width}*{filter_config.source_height} "
        f"using superview scaling"
    )
    if filter_config.target_width < filter_config.source_width:
        logger.warning(
            f"Target width {filter_config.target_width} is narrower than the "
            f"source width {filter_config.source_width}; the remap will be inverted"
        )

    with write_filters(filter_config) as (x_map_path, y_map_path):
        logger.info(
            f"Filter files generated, re-encoding video at bitrate "
            f"{bitrate / 1024 / 1024:.1f} MB/s"
        )
        engine(TranscodeJob(
            input_path=input_path,
            output_path=output_path,
            x_map_path=x_map_path,
            y_map_path=y_map_path,
            codec_name=stream.codec_name,
            bitrate=bitrate,
            duration=stream.duration,
        ))

    logger.info(f"Re-encoded {input_path} in {time.time() - start:.1f}s")
    return output_path
