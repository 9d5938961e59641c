"""Bucket memories into year and month sections for display."""

from collections.abc import Iterable

from .models import Memory, MonthSection, YearSection


def group_by(memories: Iterable[Memory], key) -> dict[str, list[Memory]]:
    """Group preserving first-seen key order and member order."""
    groups: dict[str, list[Memory]] = {}
    for memory in memories:
        groups.setdefault(key(memory), []).append(memory)
    return groups


def build_sections(memories: Iterable[Memory]) -> list[YearSection]:
    """Rebuild the full year -> month -> memories hierarchy.

    Years are ordered by descending string value. Months are ordered by the
    date of the first memory found in each month group, newest first. Members
    keep the order in which they were grouped; they are not re-sorted.
    """
    by_year = group_by(memories, lambda m: m.year)

    sections = []
    for year in sorted(by_year, reverse=True):
        by_month = group_by(by_year[year], lambda m: m.month)
        month_names = sorted(by_month, key=lambda name: by_month[name][0].date, reverse=True)
        months = [MonthSection(name=name, memories=by_month[name]) for name in month_names]
        sections.append(YearSection(year=year, months=months))
    return sections
