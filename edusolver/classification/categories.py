"""
History grouping by education level and subject.

The categories view shows one entry per (level, subject) pair of the
current app mode, most recently used first.
"""

from typing import Dict, List

from ..models import AppMode, Category, Scan


def category_key(scan: Scan) -> str:
    return f"{scan.education_level.value}|{scan.display_subject}"


def group_scans(scans: List[Scan], mode: AppMode) -> List[Category]:
    """
    Group the scans of one mode into categories.

    Args:
        scans: All saved scans, in any order
        mode: Only scans created in this mode are grouped

    Returns:
        Categories ordered by their latest timestamp, newest first
    """
    groups: Dict[str, Category] = {}

    for scan in scans:
        if scan.mode != mode:
            continue

        key = category_key(scan)
        group = groups.get(key)
        if group is None:
            group = Category(
                level=scan.education_level.value,
                subject=scan.display_subject,
                custom_subject=scan.custom_subject,
                count=0,
                last_time=scan.timestamp,
            )
            groups[key] = group

        group.count += 1
        if scan.timestamp > group.last_time:
            group.last_time = scan.timestamp

    return sorted(groups.values(), key=lambda c: c.last_time, reverse=True)


def scans_in_category(scans: List[Scan], category: Category, mode: AppMode) -> List[Scan]:
    """All scans of one category, newest first."""
    matching = [
        scan
        for scan in scans
        if scan.mode == mode and category_key(scan) == category.key
    ]
    return sorted(matching, key=lambda s: s.timestamp, reverse=True)
