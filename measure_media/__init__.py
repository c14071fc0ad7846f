"""Inject intrinsic width/height attributes into HTML image and video elements."""

from .config import MeasureConfig
from .models import MeasureReport, PendingTask, ProbeResult
from .paths import get_media_path
from .probe import ProbeError, probe_dimensions
from .transform import MediaMeasurer, measure_media, measure_media_sync

__all__ = [
    "MeasureConfig",
    "MeasureReport",
    "MediaMeasurer",
    "PendingTask",
    "ProbeError",
    "ProbeResult",
    "get_media_path",
    "measure_media",
    "measure_media_sync",
    "probe_dimensions",
]
