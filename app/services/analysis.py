"""
List filtering, pagination and chart series for the inventory screens.

These used to be computed in the browser; keeping them here lets the
frontend render whatever the API returns.
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from app.models.vehicle import Vehicle

ITEMS_PER_PAGE = 10
PAGE_WINDOW = 5
TOP_VEHICLES_LIMIT = 20


def filter_vehicles(vehicles: Sequence[Vehicle], term: str | None) -> List[Vehicle]:
    """Case-insensitive substring match against make, model or year."""
    needle = (term or "").strip().lower()
    if not needle:
        return list(vehicles)

    def matches(v: Vehicle) -> bool:
        return (
            (v.make is not None and needle in v.make.lower())
            or (v.model is not None and needle in v.model.lower())
            or (v.year is not None and needle in str(v.year))
        )

    return [v for v in vehicles if matches(v)]


@dataclass
class Page:
    items: List[Vehicle]
    page: int
    pageCount: int
    pages: List[int] = field(default_factory=list)


def page_window(page: int, page_count: int, width: int = PAGE_WINDOW) -> List[int]:
    """Up to `width` page numbers around `page`, shifted left near the end."""
    if page_count < 1:
        return []
    start = max(page - 2, 1)
    end = min(start + width - 1, page_count)
    if end - start < width - 1:
        start = max(end - width + 1, 1)
    return list(range(start, end + 1))


def paginate(items: Sequence[Vehicle], page: int = 1, per_page: int = ITEMS_PER_PAGE) -> Page:
    page_count = math.ceil(len(items) / per_page) if items else 0
    page = min(max(page, 1), max(page_count, 1))
    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        pageCount=page_count,
        pages=page_window(page, page_count),
    )


def top_vehicles(vehicles: Sequence[Vehicle], limit: int = TOP_VEHICLES_LIMIT) -> List[Dict[str, object]]:
    """Bar chart series: highest counts first."""
    ranked = sorted(vehicles, key=lambda v: v.count or 0, reverse=True)[:limit]
    return [{"label": f"{v.make} {v.model}", "count": v.count or 0} for v in ranked]


def make_distribution(vehicles: Sequence[Vehicle]) -> Dict[str, int]:
    """Pie chart series: number of rows per make, in first-seen order."""
    makes: Dict[str, int] = {}
    for v in vehicles:
        key = v.make or ""
        makes[key] = makes.get(key, 0) + 1
    return makes


def total_count(vehicles: Sequence[Vehicle]) -> int:
    return sum(v.count or 0 for v in vehicles)
