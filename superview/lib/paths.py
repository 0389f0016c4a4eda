"""Centralized path and tool resolution for Superview."""

import os
import sys
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

TOOL_ENV_VARS = {
    "ffmpeg": "SUPERVIEW_FFMPEG",
    "ffprobe": "SUPERVIEW_FFPROBE",
}


def get_project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


def get_config_path(override: Optional[str] = None) -> Path:
    """Return the config.toml location.

    An explicit override wins, then SUPERVIEW_CONFIG, then
    PROJECT_ROOT / "config" / "config.toml".
    """
    if override:
        return Path(override)
    env_path = os.getenv("SUPERVIEW_CONFIG", "")
    if env_path:
        return Path(env_path)
    return PROJECT_ROOT / "config" / "config.toml"


def default_executable(name: str, platform: Optional[str] = None) -> str:
    """Platform-specific executable name (``ffprobe.exe`` on Windows)."""
    platform = platform or sys.platform
    if platform.startswith("win"):
        return f"{name}.exe"
    return name


def resolve_tool(config: dict, name: str) -> str:
    """Resolve the executable for an external tool.

    Environment variable overrides always win, then the [tools] table of
    config.toml, then the platform default.
    """
    env_var = TOOL_ENV_VARS.get(name)
    if env_var:
        env_val = os.getenv(env_var, "")
        if env_val:
            return env_val

    configured = config.get("tools", {}).get(name, "")
    if configured:
        return configured

    return default_executable(name)
