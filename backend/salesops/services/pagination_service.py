# Overview: Sorting and page slicing for grouped report rows.

"""
Summary statistics are always computed from the complete row list before
anything here runs. This module only orders that list and cuts one page out
of it, so summaries never depend on page/limit.
"""

from __future__ import annotations

import math
from typing import Any

from .report_filters import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE


def _tie_key(row: dict, tie_field: str) -> tuple:
    value = row.get(tie_field)
    return (value is None, value if value is not None else 0)


def sort_rows(rows: list[dict], sort_by: str, *, descending: bool, tie_field: str = "id") -> list[dict]:
    """
    Stable sort on sort_by. Ties keep ascending tie_field order; rows whose
    sort value is None always come last.
    """
    ordered = sorted(rows, key=lambda row: _tie_key(row, tie_field))
    present = [row for row in ordered if row.get(sort_by) is not None]
    missing = [row for row in ordered if row.get(sort_by) is None]
    present.sort(key=lambda row: row[sort_by], reverse=descending)
    return present + missing


def pagination_info(total_records: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total_records / limit) if limit else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_records": total_records,
        "limit": limit,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def paginate(rows: list[Any], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> tuple[list[Any], dict]:
    """Slice rows[(page-1)*limit : page*limit] with page >= 1 and 1 <= limit <= 100."""
    page = max(1, page)
    limit = max(1, min(MAX_PAGE_SIZE, limit))
    skip = (page - 1) * limit
    return rows[skip:skip + limit], pagination_info(len(rows), page, limit)
