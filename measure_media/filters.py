"""Eligibility checks driven by the include/exclude filter attributes."""

from __future__ import annotations

from typing import Optional

from bs4.element import Tag

from .config import FILTER_EXCLUDE, FILTER_INCLUDE, MeasureConfig


def has_attr(node: Optional[Tag], name: str) -> bool:
    return node is not None and name in (node.attrs or {})


def check_filter(node: Optional[Tag], config: MeasureConfig, nested: bool = False) -> bool:
    """Return True when the node may be measured under the configured filter mode.

    Nested nodes (an ``<img>`` reached through a ``<picture>``) skip the
    include-attribute requirement: the enclosing element already opted in.
    """
    if config.filter == FILTER_EXCLUDE:
        return not has_attr(node, config.exclude)
    if config.filter == FILTER_INCLUDE:
        return nested or has_attr(node, config.include)
    return False
