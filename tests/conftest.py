"""Shared test fixtures for Superview tests."""

import json
import stat
import sys

import pytest

from superview.lib.ffprobe import StreamSpec


@pytest.fixture
def mock_ffprobe_result():
    """Return ffprobe JSON for `-select_streams v:0 -show_entries stream=...`."""
    return {
        "programs": [],
        "streams": [
            {
                "codec_name": "h264",
                "width": 1920,
                "height": 1080,
                "duration": "150.000000",
                "bit_rate": "45000000",
            },
        ],
    }


@pytest.fixture
def stream_spec():
    return StreamSpec(
        codec_name="h264",
        width=1920,
        height=1080,
        duration=150.0,
        bitrate=45000000,
    )


@pytest.fixture
def input_video(tmp_path):
    """A file that can be opened; its content is never decoded."""
    path = tmp_path / "GX010001.MP4"
    path.write_bytes(b"\x00" * 64)
    return path


@pytest.fixture
def quiet_config():
    """Config that skips the `ffmpeg -codecs` diagnostics."""
    return {"diagnostics": {"show_codec_support": False}}


@pytest.fixture
def make_script(tmp_path):
    """Write an executable /bin/sh script that stands in for ffmpeg/ffprobe."""
    if sys.platform.startswith("win"):
        pytest.skip("shell script fakes need a POSIX shell")

    def _make(name, body):
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body)
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def fake_ffprobe(make_script, mock_ffprobe_result):
    payload = json.dumps(mock_ffprobe_result)
    return make_script("ffprobe", f"cat <<'EOF'\n{payload}\nEOF\n")
