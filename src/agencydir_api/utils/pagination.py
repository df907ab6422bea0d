"""Offset pagination helpers."""

from __future__ import annotations

from typing import Any

from agencydir_shared.models.agencies import PageMetadata


def range_bounds(limit: int, offset: int) -> tuple[int, int]:
    """Inclusive row range for `.range()`: (offset, offset + limit - 1)."""
    return offset, offset + limit - 1


def apply_range(query: Any, limit: int, offset: int) -> Any:
    start, end = range_bounds(limit, offset)
    return query.range(start, end)


def build_page_metadata(total: int | None, limit: int, offset: int) -> dict[str, Any]:
    """Public pagination block; a missing count is reported as 0."""
    return PageMetadata.build(total or 0, limit, offset).to_public_dict()
