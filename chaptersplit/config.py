"""Configuration model and loaders for chaptersplit.

Responsibilities:
- Define run configuration and external tool settings as typed dataclasses.
- Provide loader entry points for YAML- and environment-based tool settings.

Key types:
- `ToolSettings`: executables and encoder settings for the external tools.
- `SplitConfig`: normalized settings for one split run.
- `ConfigLoader`: static construction helpers for `ToolSettings`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .parsing import normalize_optional_string, parse_positive_int


_DEFAULT_BITRATE_KBPS = 128
_DEFAULT_OUTPUT_EXTENSION = "mp3"


@dataclass(frozen=True, slots=True)
class ToolSettings:
    """External tool settings used by the probe and both pipeline stages.

    Attributes:
        ffprobe: Metadata probe executable name or path.
        ffmpeg: Decode stage executable name or path.
        lame: Encode stage executable name or path.
        bitrate_kbps: Constant bitrate passed to the encoder.
        output_extension: Extension of the written chapter files, without dot.
    """

    ffprobe: str = "ffprobe"
    ffmpeg: str = "ffmpeg"
    lame: str = "lame"
    bitrate_kbps: int = _DEFAULT_BITRATE_KBPS
    output_extension: str = _DEFAULT_OUTPUT_EXTENSION

    def validate(self) -> None:
        """Validate tool settings before any process is launched."""

        for field_name in ("ffprobe", "ffmpeg", "lame", "output_extension"):
            value = getattr(self, field_name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"`{field_name}` must be a non-empty string.")
        if self.output_extension.startswith("."):
            raise ValueError("`output_extension` must not start with a dot.")
        parse_positive_int(self.bitrate_kbps, "bitrate_kbps")


@dataclass(slots=True)
class SplitConfig:
    """Runtime configuration for one split run.

    Attributes:
        input_path: Path to the chaptered source container.
        output_dir: Directory receiving one file per chapter.
        title: Optional title override for album tag and filename prefix.
        with_chapter_number: Whether filenames include the 4-digit chapter number.
        activation_bytes: Optional decryption key for `.aax` containers.
        tools: External tool settings.
    """

    input_path: Path
    output_dir: Path
    title: str = ""
    with_chapter_number: bool = False
    activation_bytes: str = ""
    tools: ToolSettings = field(default_factory=ToolSettings)

    @property
    def resolved_activation_bytes(self) -> str | None:
        """Return the activation key, or `None` when it must not be forwarded."""

        return normalize_optional_string(self.activation_bytes)

    def validate(self) -> None:
        """Validate runtime configuration values before pipeline execution."""

        if not str(self.input_path).strip():
            raise ValueError("`input_path` must be a non-empty path.")
        if not str(self.output_dir).strip():
            raise ValueError("`output_dir` must be a non-empty path.")
        self.tools.validate()


class ConfigLoader:
    """Factory methods for creating `ToolSettings` from external sources."""

    _SUPPORTED_YAML_KEYS = frozenset(
        {"ffprobe", "ffmpeg", "lame", "bitrate_kbps", "output_extension"}
    )
    _ENV_KEYS = {
        "ffprobe": "CHAPTERSPLIT_FFPROBE",
        "ffmpeg": "CHAPTERSPLIT_FFMPEG",
        "lame": "CHAPTERSPLIT_LAME",
        "bitrate_kbps": "CHAPTERSPLIT_BITRATE_KBPS",
        "output_extension": "CHAPTERSPLIT_OUTPUT_EXTENSION",
    }

    @staticmethod
    def tools_from_yaml(path: Path, base: ToolSettings | None = None) -> ToolSettings:
        """Create validated tool settings from a YAML file layered over `base`."""

        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")

        unknown = sorted(set(payload).difference(ConfigLoader._SUPPORTED_YAML_KEYS))
        if unknown:
            raise ValueError(
                f"YAML `{path}` includes unsupported key(s): {', '.join(unknown)}."
            )

        settings = ConfigLoader._apply_overrides(
            base or ToolSettings(), payload, source_label=f"YAML `{path}`"
        )
        settings.validate()
        return settings

    @staticmethod
    def tools_from_env(
        env: Mapping[str, str] | None = None, base: ToolSettings | None = None
    ) -> ToolSettings:
        """Create validated tool settings from `CHAPTERSPLIT_*` environment variables."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload = {
            key: env_map[env_key]
            for key, env_key in ConfigLoader._ENV_KEYS.items()
            if normalize_optional_string(env_map.get(env_key)) is not None
        }
        settings = ConfigLoader._apply_overrides(
            base or ToolSettings(), payload, source_label="environment"
        )
        settings.validate()
        return settings

    @staticmethod
    def _apply_overrides(
        base: ToolSettings, payload: Mapping[str, Any], source_label: str
    ) -> ToolSettings:
        """Return `base` with every present payload value normalized and applied."""

        overrides: dict[str, Any] = {}
        for key in ("ffprobe", "ffmpeg", "lame", "output_extension"):
            if key not in payload:
                continue
            value = normalize_optional_string(payload[key])
            if value is None:
                raise ValueError(f"{source_label} field `{key}` must be a non-empty string.")
            overrides[key] = value

        if "bitrate_kbps" in payload:
            try:
                overrides["bitrate_kbps"] = parse_positive_int(
                    payload["bitrate_kbps"], "bitrate_kbps"
                )
            except ValueError as exc:
                raise ValueError(f"{source_label} field {exc}") from exc

        return replace(base, **overrides)
