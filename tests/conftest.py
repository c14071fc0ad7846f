"""Shared fixtures: a fake probe executable and a recording probe stub."""

from __future__ import annotations

import json
import shlex
import sys
import textwrap
from pathlib import Path
from typing import Dict, List, Tuple

import pytest

from measure_media import transform
from measure_media.models import ProbeResult
from measure_media.probe import ProbeError

# Echoes the target file's contents as the probe report. A file starting with
# "STDERR:" writes the rest to stderr, "EXIT:<n>" exits with status n.
_FAKE_PROBE = textwrap.dedent(
    """
    import sys

    path = sys.argv[-1]
    try:
        with open(path, encoding="utf-8") as handle:
            data = handle.read()
    except OSError as exc:
        sys.stderr.write(str(exc))
        sys.exit(1)
    if data.startswith("STDERR:"):
        sys.stderr.write(data[len("STDERR:"):])
    elif data.startswith("EXIT:"):
        sys.exit(int(data[len("EXIT:"):]))
    else:
        sys.stdout.write(data)
    """
)


@pytest.fixture
def fake_probe(tmp_path: Path) -> str:
    """Return a ``bin`` value that runs the fake probe script."""
    script = tmp_path / "fake_probe.py"
    script.write_text(_FAKE_PROBE, encoding="utf-8")
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


def write_media(directory: Path, name: str, width: int, height: int) -> Path:
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps({"streams": [{"index": 0, "width": width, "height": height}]}),
        encoding="utf-8",
    )
    return path


class RecordingProbe:
    """Stand-in for ``probe_dimensions`` keyed by file name."""

    def __init__(self) -> None:
        self.sizes: Dict[str, Tuple[int, int]] = {}
        self.calls: List[str] = []

    async def __call__(self, path: str, bin: str = "ffprobe") -> ProbeResult:
        self.calls.append(path)
        name = Path(path).name
        if name not in self.sizes:
            raise ProbeError(path, "no such file")
        width, height = self.sizes[name]
        return ProbeResult(width=width, height=height)

    @property
    def names(self) -> List[str]:
        return [Path(path).name for path in self.calls]


@pytest.fixture
def recording_probe(monkeypatch: pytest.MonkeyPatch) -> RecordingProbe:
    probe = RecordingProbe()
    monkeypatch.setattr(transform, "probe_dimensions", probe)
    return probe
