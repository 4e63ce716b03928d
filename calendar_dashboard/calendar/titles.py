"""Bracketed tag prefixes on event titles.

A title such as ``"[英語] 単語復習"`` carries the tag ``英語``. The same
pattern is used when reports group time by tag and when the schedule editor
splits a title into its tag and clean text, so both stay in agreement.
"""
from __future__ import annotations

import re
from typing import Optional

UNCLASSIFIED_TAG = "未分類"

_TAG_PREFIX = re.compile(r"^\s*\[([^\]]+)\]")
_TAG_PREFIX_WITH_SPACE = re.compile(r"^\s*\[[^\]]+\]\s*")


def extract_tag(summary: Optional[str]) -> str:
    """Return the tag of ``summary`` or the unclassified sentinel."""
    if not summary:
        return UNCLASSIFIED_TAG
    match = _TAG_PREFIX.match(summary)
    if not match:
        return UNCLASSIFIED_TAG
    return match.group(1).strip() or UNCLASSIFIED_TAG


def strip_tag_prefix(summary: Optional[str]) -> str:
    """Drop a leading ``[tag]`` and the whitespace that follows it."""
    return _TAG_PREFIX_WITH_SPACE.sub("", summary or "", count=1)


def has_tag_prefix(summary: Optional[str]) -> bool:
    return bool(_TAG_PREFIX.match(summary or ""))


def build_tagged_title(tag: Optional[str], title: Optional[str]) -> str:
    """Prepend ``[tag] `` to ``title`` unless it already carries a prefix."""
    clean_title = (title or "").strip()
    clean_tag = (tag or "").strip()
    if not clean_tag:
        return clean_title
    if has_tag_prefix(clean_title):
        return clean_title
    return f"[{clean_tag}] {clean_title}"
