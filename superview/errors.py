"""Error taxonomy -- one exception per pipeline stage, each carrying its cause."""

from pathlib import Path
from typing import Optional


class SuperviewError(Exception):
    """Base class for every failure the pipeline reports."""


class OpenInputError(SuperviewError):
    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not open input {self.path}: {cause}")


class CodecListError(SuperviewError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Could not get ffmpeg codec list: {cause}")


class InvalidUtf8Error(SuperviewError):
    def __init__(self, what: str, cause: Exception):
        self.what = what
        self.cause = cause
        super().__init__(f"Invalid UTF-8: {what}")


class ProbeFailed(SuperviewError):
    """ffprobe could not be run or exited non-zero."""

    def __init__(self, command: str, exit_status: Optional[int] = None,
                 cause: Optional[Exception] = None):
        self.command = command
        self.exit_status = exit_status
        self.cause = cause
        if cause is not None:
            message = f"Could not run {command}: {cause}"
        else:
            message = f"'{command}' exited unsuccessfully (exit status {exit_status})"
        super().__init__(message)


class ProbeParseError(SuperviewError):
    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not parse ffprobe output for '{self.path}': {cause}")


class FilterCreateError(SuperviewError):
    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Could not create filter file: {cause}")


class FilterWriteError(SuperviewError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write to filter file {path}: {cause}")


class FilterFlushError(SuperviewError):
    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not flush filter file {path}: {cause}")


class SpawnFailed(SuperviewError):
    def __init__(self, command: str, cause: Exception):
        self.command = command
        self.cause = cause
        super().__init__(f"Could not run {command}: {cause}")


class TranscodeFailed(SuperviewError):
    def __init__(self, exit_status: int):
        self.exit_status = exit_status
        super().__init__(f"ffmpeg exited unsuccessfully (exit status {exit_status})")


class ConfigError(SuperviewError):
    def __init__(self, path: Path, cause: Exception):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Could not load config {self.path}: {cause}")
