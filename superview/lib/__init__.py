"""Helpers around ffprobe, ffmpeg and the remap filter maps."""
