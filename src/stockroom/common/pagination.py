import math
from dataclasses import dataclass, field
from typing import Generic, List, TypeVar

T = TypeVar("T")


def total_pages(total: int, limit: int) -> int:
    """Number of pages needed for ``total`` records; 0 when there are none."""
    if total <= 0:
        return 0
    return math.ceil(total / limit)


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


@dataclass
class Page(Generic[T]):
    records: List[T]
    total: int
    page: int
    limit: int
    total_pages: int = field(init=False)

    def __post_init__(self):
        self.total_pages = total_pages(self.total, self.limit)
