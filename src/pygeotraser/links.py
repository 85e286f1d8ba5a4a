"""Shared live-map pages for activity groups."""

from __future__ import annotations

from pygeotraser._constants import GROUP_MAP_PAGES, MAP_BASE_URL


def visualization_url(group_id: str | None) -> str | None:
    """Live map URL for *group_id*, or ``None`` when the group has no page."""
    if group_id is None:
        return None
    page = GROUP_MAP_PAGES.get(group_id.strip().lower())
    if page is None:
        return None
    return f"{MAP_BASE_URL}/{page}"
