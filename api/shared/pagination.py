"""Page arithmetic for list endpoints."""
import math

from api.shared.dtos import PaginationDTO


def offset_for(page: int, limit: int) -> int:
    """Number of rows to skip for a 1-based page."""
    return (page - 1) * limit


def build_pagination(page: int, limit: int, total_items: int) -> PaginationDTO:
    total_pages = math.ceil(total_items / limit)
    has_next_page = page < total_pages
    has_previous_page = page > 1
    return PaginationDTO(
        page=page,
        limit=limit,
        total_pages=total_pages,
        total_items=total_items,
        has_next_page=has_next_page,
        has_previous_page=has_previous_page,
        next_page=page + 1 if has_next_page else None,
        previous_page=page - 1 if has_previous_page else None,
    )
