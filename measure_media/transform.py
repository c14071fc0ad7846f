"""Schedule probes for media elements and merge the measured dimensions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Set, Tuple

from bs4.element import Tag

from .config import DONE_ATTR, MeasureConfig
from .filters import check_filter
from .models import MeasureReport, PendingTask, ProbeResult
from .paths import get_media_path
from .probe import ProbeError, probe_dimensions

logger = logging.getLogger("measure_media")

CLEANUP_TAGS = ["picture", "source", "img", "video"]


def _attr(node: Tag, name: str) -> Optional[str]:
    value = node.get(name)
    if isinstance(value, list):
        return " ".join(value)
    return value


def merge_dimensions(node: Tag, result: ProbeResult, override: bool = True) -> None:
    """Write probe dimensions into the node's attributes."""
    for key, value in result.as_attrs().items():
        if override or key not in node.attrs:
            node[key] = value


@dataclass
class MeasureRun:
    """Task set and handled-node bookkeeping for one pipeline invocation."""

    config: MeasureConfig
    tasks: List[PendingTask] = field(default_factory=list)
    handled: Set[int] = field(default_factory=set)

    def mark_done(self, node: Tag) -> None:
        self.handled.add(id(node))

    def is_done(self, node: Tag) -> bool:
        return id(node) in self.handled

    def schedule(self, node: Tag, src: Optional[str], mark: bool = True) -> Optional[PendingTask]:
        """Resolve ``src`` and start probing it on behalf of ``node``."""
        path = get_media_path(src, self.config.root, self.config.exclude_url)
        if path is None:
            logger.debug("Skipping <%s> with unmeasurable source %r", node.name, src)
            return None
        if mark:
            self.mark_done(node)
        pending = PendingTask(node=node, path=path)
        pending.task = asyncio.create_task(self._measure(pending))
        self.tasks.append(pending)
        return pending

    async def _measure(self, task: PendingTask) -> ProbeResult:
        result = await probe_dimensions(task.path, self.config.bin)
        task.result = result
        merge_dimensions(task.node, result, self.config.override)
        return result

    async def settle(self) -> MeasureReport:
        """Wait for every scheduled probe, recording failures without raising."""
        report = MeasureReport(scheduled=len(self.tasks))
        if not self.tasks:
            return report
        outcomes = await asyncio.gather(
            *(pending.task for pending in self.tasks),
            return_exceptions=True,
        )
        for task, outcome in zip(self.tasks, outcomes):
            if not isinstance(outcome, BaseException):
                report.measured += 1
                continue
            task.error = outcome
            report.failed += 1
            report.failures[task.path] = str(outcome)
            if isinstance(outcome, ProbeError):
                logger.error("Failed to measure %s: %s", task.path, outcome.reason)
            else:
                logger.error(
                    "Unexpected error measuring %s",
                    task.path,
                    exc_info=(type(outcome), outcome, outcome.__traceback__),
                )
        return report


def _dispatch_picture(node: Tag, run: MeasureRun) -> None:
    config = run.config
    img = node.find("img", src=True, recursive=False)
    if check_filter(node, config):
        sources = node.find_all("source", recursive=False)
        for source in sources:
            if check_filter(source, config):
                run.schedule(source, _attr(source, "srcset"))
        if img is not None and (
            not sources or (config.nested_img and check_filter(img, config, nested=True))
        ):
            run.schedule(img, _attr(img, "src"))
    if img is not None:
        run.mark_done(img)


def _dispatch_img(node: Tag, run: MeasureRun) -> None:
    if check_filter(node, run.config) and not run.is_done(node):
        run.schedule(node, _attr(node, "src"))


def _dispatch_video(node: Tag, run: MeasureRun) -> None:
    if not check_filter(node, run.config):
        return
    if "src" in node.attrs:
        src = _attr(node, "src")
    else:
        source = node.find("source", src=True, recursive=False)
        src = _attr(source, "src") if source is not None else None
    run.schedule(node, src, mark=False)


# Order matters: <picture> claims its inner <img> before the standalone pass.
DISPATCHERS: Tuple[Tuple[str, str, Callable[[Tag, MeasureRun], None]], ...] = (
    ("picture", "image", _dispatch_picture),
    ("img", "image", _dispatch_img),
    ("video", "video", _dispatch_video),
)


def cleanup(tree: Tag, config: MeasureConfig) -> None:
    """Strip the done marker and, when configured, the filter attributes."""
    names = [DONE_ATTR]
    if config.clear:
        names += [config.exclude, config.include]
    for node in tree.find_all(CLEANUP_TAGS):
        for name in names:
            node.attrs.pop(name, None)


class MediaMeasurer:
    """Inject intrinsic ``width``/``height`` into image and video elements."""

    def __init__(self, config: Optional[MeasureConfig] = None, **options: Any) -> None:
        self.config = config or MeasureConfig.from_options(options)

    def dispatch(self, tree: Tag) -> MeasureRun:
        """Run the per-tag passes and return the run holding scheduled tasks.

        Must be called from inside a running event loop.
        """
        run = MeasureRun(self.config)
        for tag, media, dispatcher in DISPATCHERS:
            if not getattr(self.config, media):
                continue
            for node in tree.find_all(tag):
                dispatcher(node, run)
        return run

    async def run(self, tree: Tag) -> MeasureReport:
        run = self.dispatch(tree)
        report = await run.settle()
        cleanup(tree, self.config)
        logger.info(
            "Measured %d/%d media elements (%d failed)",
            report.measured,
            report.scheduled,
            report.failed,
        )
        return report

    async def transform(self, tree: Tag) -> Tag:
        await self.run(tree)
        return tree

    __call__ = transform


async def measure_media(tree: Tag, config: Optional[MeasureConfig] = None, **options: Any) -> Tag:
    """Measure media in ``tree`` in place and return it."""
    return await MediaMeasurer(config, **options).transform(tree)


def measure_media_sync(tree: Tag, config: Optional[MeasureConfig] = None, **options: Any) -> Tag:
    """Blocking variant of :func:`measure_media` for callers without a loop."""
    return asyncio.run(measure_media(tree, config, **options))
