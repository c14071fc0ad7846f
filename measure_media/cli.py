"""Command-line entry point for measuring media in HTML files."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
import time
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from bs4 import BeautifulSoup

from .config import (
    DEFAULT_EXCLUDE_ATTR,
    DEFAULT_INCLUDE_ATTR,
    DEFAULT_PROBE_BIN,
    FILTER_EXCLUDE,
    FILTER_INCLUDE,
    MeasureConfig,
)
from .models import MeasureReport
from .transform import MediaMeasurer

logger = logging.getLogger("measure_media.cli")

HTML_SUFFIXES = {".html", ".htm"}


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Add intrinsic width/height attributes to <img>, <picture> and <video> elements.",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="HTML files or directories containing HTML files",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help=(
            "Directory to write rewritten files to, keeping their paths relative to "
            "each directory argument (default: rewrite in place). Files are "
            "re-serialised by BeautifulSoup, not minimally edited"
        ),
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Directory media paths are resolved against (default: each file's directory)",
    )
    parser.add_argument(
        "--bin",
        default=DEFAULT_PROBE_BIN,
        help="Probe binary used to measure media",
    )
    parser.add_argument(
        "--filter",
        choices=(FILTER_EXCLUDE, FILTER_INCLUDE),
        default=FILTER_EXCLUDE,
        help="Measure everything except opted-out elements, or only opted-in ones",
    )
    parser.add_argument(
        "--include-attr",
        default=DEFAULT_INCLUDE_ATTR,
        help="Attribute that opts an element in when --filter=include",
    )
    parser.add_argument(
        "--exclude-attr",
        default=DEFAULT_EXCLUDE_ATTR,
        help="Attribute that opts an element out when --filter=exclude",
    )
    parser.add_argument(
        "--exclude-url",
        action="append",
        default=[],
        metavar="SUBSTRING",
        help="Skip sources containing this substring (repeatable)",
    )
    parser.add_argument(
        "--no-override",
        action="store_true",
        help="Keep existing width/height attributes instead of replacing them",
    )
    parser.add_argument(
        "--no-clear",
        action="store_true",
        help="Leave the include/exclude attributes in the output",
    )
    parser.add_argument("--no-image", action="store_true", help="Do not measure images")
    parser.add_argument("--no-video", action="store_true", help="Do not measure videos")
    parser.add_argument(
        "--nested-img",
        action="store_true",
        help="Also measure the <img> fallback inside <picture> elements with sources",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> MeasureConfig:
    return MeasureConfig(
        root=args.root or ".",
        bin=args.bin,
        filter=args.filter,
        include=args.include_attr,
        exclude=args.exclude_attr,
        exclude_url=tuple(args.exclude_url),
        override=not args.no_override,
        clear=not args.no_clear,
        image=not args.no_image,
        video=not args.no_video,
        nested_img=args.nested_img,
    )


def iter_html_files(paths: Iterable[Path]) -> Iterable[Tuple[Path, Path]]:
    """Yield ``(base, file)`` pairs; ``base`` is the directory argument or the file's parent."""
    for path in paths:
        if path.is_dir():
            for child in sorted(path.rglob("*")):
                if child.is_file() and child.suffix.lower() in HTML_SUFFIXES:
                    yield path, child
        else:
            yield path.parent, path


def _destination(source: Path, base: Path, output: Optional[Path]) -> Path:
    if output is None:
        return source
    return output / source.relative_to(base)


async def process_file(
    source: Path,
    destination: Path,
    config: MeasureConfig,
) -> Optional[MeasureReport]:
    """Measure media in one HTML file and write the result to ``destination``."""
    try:
        html = source.read_text(encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to read %s: %s", source, exc)
        return None

    soup = BeautifulSoup(html, "html.parser")
    report = await MediaMeasurer(config).run(soup)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_text(str(soup), encoding="utf-8")
    except OSError as exc:
        logger.error("Failed to write %s: %s", destination, exc)
        return None
    logger.info("Saved %s", destination)
    return report


async def run(args: argparse.Namespace) -> List[Optional[MeasureReport]]:
    base = build_config(args)
    reports: List[Optional[MeasureReport]] = []
    for base_dir, source in iter_html_files(args.paths):
        config = base
        if args.root is None:
            config = dataclasses.replace(base, root=str(source.resolve().parent))
        destination = _destination(source, base_dir, args.output)
        reports.append(await process_file(source, destination, config))
    return reports


def main(argv: Sequence[str] | None = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )

    overall_start = time.perf_counter()
    reports = asyncio.run(run(args))
    total_elapsed = time.perf_counter() - overall_start

    completed = [report for report in reports if report is not None]
    measured = sum(report.measured for report in completed)
    scheduled = sum(report.scheduled for report in completed)
    failed = sum(report.failed for report in completed)
    logger.info(
        "Finished in %.2fs (%d/%d measured, %d failed)",
        total_elapsed,
        measured,
        scheduled,
        failed,
    )
    return 0 if len(completed) == len(reports) else 1


if __name__ == "__main__":
    sys.exit(main())
