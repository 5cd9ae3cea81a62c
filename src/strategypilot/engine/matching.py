"""
StrategyPilot Alias Matching

Pure, normalized matching between free-text item names (timeline entries,
impact-map names, declared dependency labels) and canonical dependencies.

Key features:
- Text normalization (case, punctuation, whitespace)
- Phrase containment on token boundaries ("cad" does not match "academy")
- Declarative alias table built from catalogue dependencies
- Exclusion terms so "CCTV continuity" does not count as the CCTV window
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..models import Catalogue, DependencyDefinition, TimelineEntry


_NON_ALNUM = re.compile(r"[^a-z0-9]+")


# =============================================================================
# Normalization
# =============================================================================

def normalize(text: Optional[str]) -> str:
    """Lowercase, replace punctuation with spaces and collapse whitespace."""
    if not text:
        return ""
    return _NON_ALNUM.sub(" ", text.lower()).strip()


def contains_phrase(text: Optional[str], phrase: Optional[str]) -> bool:
    """
    True if the normalized phrase appears in the normalized text on token
    boundaries.

    Example:
        >>> contains_phrase("BWV - arresting officers", "bwv")
        True
        >>> contains_phrase("Academy report", "cad")
        False
    """
    needle = normalize(phrase)
    if not needle:
        return False
    return f" {needle} " in f" {normalize(text)} "


def names_overlap(text: Optional[str], *names: Optional[str]) -> bool:
    """
    Mutual containment between text and any of the names.

    Used for caller-declared dependencies, which carry no alias table: the
    item matches if it contains the id or label, or is contained in it.
    """
    item = normalize(text)
    if not item:
        return False
    for name in names:
        candidate = normalize(name)
        if not candidate:
            continue
        if f" {candidate} " in f" {item} " or f" {item} " in f" {candidate} ":
            return True
    return False


# =============================================================================
# Dependency Matching
# =============================================================================

def matches_dependency(text: Optional[str], dependency: DependencyDefinition) -> bool:
    """
    True if text names the dependency.

    Matches on the dependency id, its label, or any alias, unless the text
    also contains one of the dependency's exclusion terms.
    """
    if not normalize(text):
        return False
    if any(contains_phrase(text, term) for term in dependency.excludes):
        return False
    candidates = (dependency.id, dependency.label) + dependency.aliases
    return any(contains_phrase(text, candidate) for candidate in candidates)


@dataclass
class AliasTable:
    """
    Declarative alias table over the canonical dependencies.

    Usage:
        table = AliasTable.from_catalogue(catalogue)
        table.match("BWV footage requested")   # ["bwv_arrest"]
        table.index(timeline)["bwv_arrest"]    # entries naming BWV
    """
    dependencies: tuple[DependencyDefinition, ...] = field(default_factory=tuple)

    @classmethod
    def from_catalogue(cls, catalogue: Catalogue) -> "AliasTable":
        return cls(dependencies=catalogue.dependencies)

    def match(self, text: Optional[str]) -> list[str]:
        """Ids of every dependency the text names, in catalogue order."""
        return [d.id for d in self.dependencies if matches_dependency(text, d)]

    def names(self, text: Optional[str], dependency_id: str) -> bool:
        return dependency_id in self.match(text)

    def index(self, timeline: Iterable[TimelineEntry]) -> dict[str, list[TimelineEntry]]:
        """Timeline entries grouped under every dependency they name, in input order."""
        grouped: dict[str, list[TimelineEntry]] = {d.id: [] for d in self.dependencies}
        for entry in timeline:
            for dependency_id in self.match(entry.item):
                grouped[dependency_id].append(entry)
        return grouped


# =============================================================================
# Timeline Helpers
# =============================================================================

def entries_for_names(
    timeline: Iterable[TimelineEntry],
    *names: Optional[str],
) -> list[TimelineEntry]:
    """Timeline entries matching a declared dependency by id or label."""
    return [entry for entry in timeline if names_overlap(entry.item, *names)]


def latest_entry(entries: Iterable[TimelineEntry]) -> Optional[TimelineEntry]:
    """
    Most recent entry by date.

    Undated entries sort as oldest; ties keep the later entry in input order.
    """
    latest: Optional[TimelineEntry] = None
    for entry in entries:
        if latest is None or _sort_date(entry) >= _sort_date(latest):
            latest = entry
    return latest


def _sort_date(entry: TimelineEntry) -> date:
    return entry.date or date.min
