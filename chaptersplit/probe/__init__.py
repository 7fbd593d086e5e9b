"""Metadata provider for chaptered containers."""

from .ffprobe import build_probe_command, parse_probe_payload, probe

__all__ = ["build_probe_command", "parse_probe_payload", "probe"]
