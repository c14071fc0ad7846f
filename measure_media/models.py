"""Data models used throughout the measurement pipeline."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, Optional

from bs4.element import Tag


@dataclass(frozen=True)
class ProbeResult:
    """Intrinsic pixel dimensions reported by the probe."""

    width: int
    height: int

    def as_attrs(self) -> Dict[str, str]:
        return {"width": str(self.width), "height": str(self.height)}


@dataclass(eq=False)
class PendingTask:
    """A probe scheduled for one node, tracked until it settles."""

    node: Tag
    path: str
    task: Optional[asyncio.Task] = None
    result: Optional[ProbeResult] = None
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.result is not None


@dataclass
class MeasureReport:
    """Outcome counts for a single pipeline run."""

    scheduled: int = 0
    measured: int = 0
    failed: int = 0
    failures: Dict[str, str] = field(default_factory=dict)
