"""Fold normalized events into per-day, per-tag minute totals."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, List

from .types import NormalizedEvent


@dataclass(slots=True)
class Aggregation:
    by_day_tag: Dict[str, Dict[str, int]] = field(default_factory=dict)
    tag_totals: Dict[str, int] = field(default_factory=dict)
    total_minutes: int = 0

    def ordered_tags(self) -> List[str]:
        """Tags by total minutes, largest first; ties keep first-seen order."""
        return [
            tag
            for tag, _ in sorted(self.tag_totals.items(), key=lambda item: -item[1])
        ]

    def minutes_for(self, day: str, tag: str) -> int:
        return self.by_day_tag.get(day, {}).get(tag, 0)

    def day_total(self, day: str) -> int:
        return sum(self.by_day_tag.get(day, {}).values())


def aggregate(events: Iterable[NormalizedEvent]) -> Aggregation:
    """Sum minutes by day and tag.

    Events without positive minutes or a day key are left out of every total.
    """
    result = Aggregation()
    for event in events:
        if event.minutes <= 0 or not event.day:
            continue
        day_map = result.by_day_tag.setdefault(event.day, {})
        day_map[event.tag] = day_map.get(event.tag, 0) + event.minutes
        result.tag_totals[event.tag] = result.tag_totals.get(event.tag, 0) + event.minutes
        result.total_minutes += event.minutes
    return result
