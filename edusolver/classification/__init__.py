"""History classification into level/subject categories."""

from .categories import group_scans, scans_in_category, category_key

__all__ = ["group_scans", "scans_in_category", "category_key"]
