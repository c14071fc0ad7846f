"""Turn raw ``src``/``srcset`` values into local file paths."""

from __future__ import annotations

import os
import re
from typing import Iterable, Optional
from urllib.parse import urlsplit

CANDIDATE_SEPARATOR = re.compile(r",\s+")
DESCRIPTOR_PATTERN = re.compile(r"\s+\d+(?:\.\d+)?[xw]$")
QUERY_OR_FRAGMENT = re.compile(r"[?#]")


def sanitize_path(src: str) -> str:
    """Drop the query string and fragment."""
    return QUERY_OR_FRAGMENT.split(src, maxsplit=1)[0]


def first_candidate(src: str) -> str:
    """Return the first candidate of a srcset list without its descriptor."""
    candidate = CANDIDATE_SEPARATOR.split(src.strip())[0]
    return DESCRIPTOR_PATTERN.sub("", candidate)


def is_local_path(src: str) -> bool:
    """Values without a URL scheme are treated as local paths.

    Protocol-relative (``//cdn/a.jpg``) and root-relative (``/a.jpg``) values
    have no scheme and therefore count as local.
    """
    try:
        return not urlsplit(src).scheme
    except ValueError:
        return True


def is_excluded_url(src: str, exclude_url: Iterable[str]) -> bool:
    lowered = src.lower()
    return any(exclude.lower() in lowered for exclude in exclude_url)


def get_media_path(
    src: Optional[str],
    root: str = ".",
    exclude_url: Iterable[str] = (),
) -> Optional[str]:
    """Resolve an attribute value to an absolute path, or None if unmeasurable."""
    if not src:
        return None
    if is_excluded_url(src, exclude_url):
        return None

    candidate = first_candidate(src)
    sanitized = sanitize_path(candidate)
    if not sanitized:
        return None
    if os.path.splitext(sanitized)[1].lower() == ".svg":
        return None
    if not is_local_path(candidate):
        return None
    return os.path.abspath(os.path.join(root, sanitized))
