"""Codec capability diagnostics from the ffmpeg codec listing."""

import subprocess

from superview.errors import CodecListError, InvalidUtf8Error

CODEC_MARKERS = ("H.264", "H.265")


def codec_support(ffmpeg: str = "ffmpeg") -> dict:
    """Return {"H.264": bool, "H.265": bool} from `ffmpeg -codecs`.

    Only the listing text is inspected; ffmpeg's exit status is not.
    """
    try:
        result = subprocess.run([ffmpeg, "-codecs"], capture_output=True)
    except OSError as e:
        raise CodecListError(e) from e

    try:
        listing = result.stdout.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidUtf8Error("codec list", e) from e

    return {marker: marker in listing for marker in CODEC_MARKERS}
