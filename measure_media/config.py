"""Configuration objects and constants for media measurement."""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple

DEFAULT_PROBE_BIN = "ffprobe"
DEFAULT_INCLUDE_ATTR = "data-measure-media-include"
DEFAULT_EXCLUDE_ATTR = "data-measure-media-exclude"
DONE_ATTR = "data-measure-media-done"

FILTER_EXCLUDE = "exclude"
FILTER_INCLUDE = "include"

_OPTION_ALIASES = {
    "excludeUrl": "exclude_url",
    "nestedImg": "nested_img",
}


@dataclass(frozen=True)
class MeasureConfig:
    """Settings that control which media is measured and how results merge."""

    root: str = "."
    bin: str = DEFAULT_PROBE_BIN
    filter: str = FILTER_EXCLUDE
    include: str = DEFAULT_INCLUDE_ATTR
    exclude: str = DEFAULT_EXCLUDE_ATTR
    exclude_url: Tuple[str, ...] = ()
    override: bool = True
    clear: bool = True
    image: bool = True
    video: bool = True
    nested_img: bool = False

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> "MeasureConfig":
        """Merge caller options over the defaults, ignoring unknown keys."""
        known = {field.name for field in fields(cls)}
        values = {}
        for key, value in (options or {}).items():
            key = _OPTION_ALIASES.get(key, key)
            if key in known:
                values[key] = value
        exclude_url = values.get("exclude_url")
        if isinstance(exclude_url, str):
            values["exclude_url"] = (exclude_url,)
        elif exclude_url is not None:
            values["exclude_url"] = tuple(exclude_url)
        return cls(**values)
