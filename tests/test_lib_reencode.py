"""Tests for superview.lib.reencode -- ffmpeg command and progress stream."""

import io
from unittest.mock import patch, MagicMock

import pytest

from superview.errors import SpawnFailed, TranscodeFailed
from superview.lib.reencode import (
    TranscodeJob,
    build_command,
    parse_progress,
    print_progress,
    reencode,
)


@pytest.fixture
def job(tmp_path):
    return TranscodeJob(
        input_path=tmp_path / "in.mp4",
        output_path=tmp_path / "out.mp4",
        x_map_path=tmp_path / "x.pgm",
        y_map_path=tmp_path / "y.pgm",
        codec_name="hevc",
        bitrate=60000000,
        duration=150.0,
    )


def _mock_popen(lines, returncode=0):
    proc = MagicMock()
    proc.stdout = io.StringIO("".join(lines))
    proc.wait.return_value = returncode
    return proc


class TestBuildCommand:
    def test_inputs_in_order(self, job):
        cmd = build_command(job)
        inputs = [cmd[i + 1] for i, arg in enumerate(cmd) if arg == "-i"]
        assert inputs == [str(job.input_path), str(job.x_map_path), str(job.y_map_path)]

    def test_filter_maps_read_as_pgm(self, job):
        cmd = build_command(job)
        for path in (job.x_map_path, job.y_map_path):
            idx = cmd.index(str(path))
            assert cmd[idx - 3:idx - 1] == ["-f", "pgm_pipe"]

    def test_encoding_args(self, job):
        cmd = build_command(job, ffmpeg="/opt/ffmpeg/bin/ffmpeg")
        assert cmd[0] == "/opt/ffmpeg/bin/ffmpeg"
        assert cmd[cmd.index("-filter_complex") + 1] == "remap,format=yuv444p,format=yuv420p"
        assert cmd[cmd.index("-c:v") + 1] == "hevc"
        assert cmd[cmd.index("-b:v") + 1] == "60000000"
        assert cmd[cmd.index("-c:a") + 1] == "copy"
        assert cmd[cmd.index("-progress") + 1] == "pipe:1"
        assert cmd[-1] == str(job.output_path)


class TestParseProgress:
    def test_percent(self):
        assert parse_progress("out_time_ms=1500000\n", 150.0) == pytest.approx(1.0)

    def test_halfway(self):
        assert parse_progress("out_time_ms=75000000", 150.0) == pytest.approx(50.0)

    def test_other_keys_ignored(self):
        assert parse_progress("frame=12\n", 150.0) is None
        assert parse_progress("out_time=00:00:01.500000\n", 150.0) is None
        assert parse_progress("progress=continue\n", 150.0) is None

    def test_unparseable_value_reads_as_zero(self):
        assert parse_progress("out_time_ms=N/A\n", 150.0) == 0.0

    def test_zero_duration(self):
        assert parse_progress("out_time_ms=1500000\n", 0.0) == 0.0


class TestReencode:
    def test_reports_progress_lines(self, job):
        lines = [
            "frame=1\n",
            "out_time_ms=N/A\n",
            "out_time_ms=1500000\n",
            "progress=continue\n",
            "out_time_ms=150000000\n",
            "progress=end\n",
        ]
        seen = []
        with patch("subprocess.Popen", return_value=_mock_popen(lines)) as mock_popen:
            reencode(job, on_progress=seen.append)
        assert seen == pytest.approx([0.0, 1.0, 100.0])
        assert mock_popen.call_args[0][0][0] == "ffmpeg"

    def test_nonzero_exit_raises(self, job):
        proc = _mock_popen(["out_time_ms=0\n"], returncode=1)
        with patch("subprocess.Popen", return_value=proc) as mock_popen:
            with pytest.raises(TranscodeFailed) as exc_info:
                reencode(job, on_progress=lambda p: None)
        assert exc_info.value.exit_status == 1
        assert mock_popen.call_count == 1

    def test_spawn_failure(self, job):
        with patch("subprocess.Popen", side_effect=FileNotFoundError("ffmpeg")):
            with pytest.raises(SpawnFailed, match="ffmpeg"):
                reencode(job)

    def test_read_error_ends_loop(self, job):
        proc = MagicMock()
        proc.stdout.__iter__.side_effect = UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        proc.wait.return_value = 0
        with patch("subprocess.Popen", return_value=proc):
            reencode(job, on_progress=lambda p: None)
        proc.stdout.close.assert_called_once()
        proc.wait.assert_called_once()

    def test_default_progress_goes_to_stderr(self, job, capsys):
        with patch("subprocess.Popen", return_value=_mock_popen(["out_time_ms=75000000\n"])):
            reencode(job)
        err = capsys.readouterr().err
        assert "\rEncoding progress: 50.00%" in err
        assert err.endswith("\n")

    def test_scripted_ffmpeg_exit_status(self, job, make_script):
        ffmpeg = make_script("ffmpeg", "echo out_time_ms=1500000\necho progress=end\nexit 3\n")
        seen = []
        with pytest.raises(TranscodeFailed) as exc_info:
            reencode(job, ffmpeg=ffmpeg, on_progress=seen.append)
        assert exc_info.value.exit_status == 3
        assert seen == pytest.approx([1.0])


def test_print_progress(capsys):
    print_progress(12.5)
    assert capsys.readouterr().err == "\rEncoding progress: 12.50%"
