"""Measure media dimensions by running ffprobe (or a compatible binary)."""

from __future__ import annotations

import asyncio
import json
import logging
import shlex
from typing import List

from .config import DEFAULT_PROBE_BIN
from .models import ProbeResult

logger = logging.getLogger("measure_media")

PROBE_ARGS = (
    "-v",
    "quiet",
    "-print_format",
    "json",
    "-show_streams",
    "-select_streams",
    "v:0",
)


class ProbeError(RuntimeError):
    """Raised when a probe cannot produce dimensions for a path."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def build_probe_command(path: str, bin: str = DEFAULT_PROBE_BIN) -> List[str]:
    """Build the argv requesting quiet JSON geometry for the first video stream."""
    return [*shlex.split(bin), *PROBE_ARGS, path]


def parse_probe_output(stdout: str, path: str) -> ProbeResult:
    """Extract width/height of stream 0 from the probe's JSON report."""
    try:
        report = json.loads(stdout)
    except ValueError as exc:
        raise ProbeError(path, f"unparseable probe output ({exc})") from exc

    streams = report.get("streams") if isinstance(report, dict) else None
    if not isinstance(streams, list) or not streams or not isinstance(streams[0], dict):
        raise ProbeError(path, "probe output has no streams")

    stream = streams[0]
    width = stream.get("width")
    height = stream.get("height")
    for value in (width, height):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ProbeError(path, "probe output has no integer width/height")
    return ProbeResult(width=width, height=height)


async def probe_dimensions(path: str, bin: str = DEFAULT_PROBE_BIN) -> ProbeResult:
    """Run the probe against ``path`` and return its dimensions."""
    command = build_probe_command(path, bin)
    logger.debug("Probing %s", path)
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as exc:
        raise ProbeError(path, f"could not run {command[0]} ({exc})") from exc

    stdout, stderr = await process.communicate()
    if process.returncode != 0:
        raise ProbeError(path, f"{command[0]} exited with status {process.returncode}")
    diagnostics = stderr.decode("utf-8", errors="replace").strip()
    if diagnostics:
        raise ProbeError(path, f"stderr: {diagnostics}")
    return parse_probe_output(stdout.decode("utf-8", errors="replace"), path)
