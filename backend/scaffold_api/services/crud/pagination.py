"""
Page-based pagination for resource listings.

Usage:
    pagination = Pagination.for_page(page=2, limit=15, max_limit=200)
    query = query.offset(pagination.offset).limit(pagination.limit)
    info = pagination.to_dict(total=count)
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class Pagination:
    """
    Pagination parameters with validation.

    Attributes:
        limit: Maximum items per page (1 to max_limit)
        offset: Number of items to skip
        max_limit: Maximum allowed limit
    """

    limit: int
    offset: int
    max_limit: int = 200

    def __post_init__(self):
        """Validate and normalize values."""
        self.limit = min(max(1, self.limit), self.max_limit)
        self.offset = max(0, self.offset)

    @classmethod
    def for_page(cls, page: Any, limit: int, max_limit: int = 200) -> "Pagination":
        """
        Build pagination from a 1-indexed page number.

        Non-numeric or non-positive pages fall back to the first page.
        """
        try:
            page_number = max(1, int(page))
        except (TypeError, ValueError):
            page_number = 1

        pagination = cls(limit=limit, offset=0, max_limit=max_limit)
        pagination.offset = (page_number - 1) * pagination.limit
        return pagination

    @property
    def page(self) -> int:
        """Calculate current page number (1-indexed)."""
        return (self.offset // self.limit) + 1

    def to_dict(self, total: int | None = None) -> dict[str, Any]:
        """
        Convert to dictionary for response.

        Args:
            total: Total count of items (optional)

        Returns:
            Dictionary with pagination metadata
        """
        result = {
            "limit": self.limit,
            "offset": self.offset,
            "page": self.page,
        }

        if total is not None:
            result["total"] = total
            result["pages"] = (total + self.limit - 1) // self.limit
            result["has_next"] = self.offset + self.limit < total
            result["has_prev"] = self.offset > 0

        return result
