# This file turns the explore endpoint's page, page_size and sort query values into checked specs.
# A sort value reads `column` or `column:direction`; the column has to be one the cost view can order by.
# Bad values raise ValueError and the router reports them as INVALID_QUERY_PARAM.

from __future__ import annotations

from dataclasses import dataclass

SORT_DIRECTIONS = frozenset({"asc", "desc"})


@dataclass(frozen=True)
class SortSpec:
    field: str
    order: str

    @property
    def as_text(self) -> str:
        return f"{self.field}:{self.order}"


@dataclass(frozen=True)
class PaginationSpec:
    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def normalize_pagination(
    *,
    page: int,
    page_size: int | None,
    default_page_size: int,
    max_page_size: int,
) -> PaginationSpec:
    """Fill in the configured page size and reject pages outside 1..max_page_size."""

    size = default_page_size if page_size is None else page_size
    if page < 1:
        raise ValueError("page starts at 1")
    if not 1 <= size <= max_page_size:
        raise ValueError(f"page_size must be between 1 and {max_page_size}")
    return PaginationSpec(page=page, page_size=size)


def parse_sort(
    *,
    requested_sort: str | None,
    default_sort: str,
    allowed_fields: set[str],
) -> SortSpec:
    """Read a sort value, falling back to the configured default; direction defaults to ascending."""

    text = (requested_sort or default_sort).strip().lower()
    if not text:
        raise ValueError("sort needs a column name")

    column, _, direction = text.partition(":")
    direction = direction or "asc"
    if column not in allowed_fields:
        raise ValueError(
            f"Unsupported sort field '{column}'. Choose one of: {', '.join(sorted(allowed_fields))}"
        )
    if direction not in SORT_DIRECTIONS:
        raise ValueError(f"sort order '{direction}' is not asc or desc")
    return SortSpec(field=column, order=direction)


def compute_total_pages(*, total_count: int, page_size: int) -> int:
    if total_count <= 0:
        return 0
    return -(-total_count // page_size)


def build_pagination_metadata(
    *, pagination: PaginationSpec, total_count: int, sort: SortSpec
) -> dict[str, object]:
    """Page block of the explore response; an empty result has zero pages and no neighbours."""

    pages = compute_total_pages(total_count=total_count, page_size=pagination.page_size)
    return {
        "page": pagination.page,
        "page_size": pagination.page_size,
        "total_count": total_count,
        "total_pages": pages,
        "has_next": pagination.page < pages,
        "has_prev": pagination.page > 1,
        "sort": sort.as_text,
    }
