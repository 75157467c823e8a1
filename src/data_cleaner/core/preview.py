import math
from typing import Optional

from data_cleaner.config import settings
from data_cleaner.models import Dataset, RowPage


def paginate(dataset: Dataset, page: int = 1, page_size: Optional[int] = None) -> RowPage:
    """
    Slice one page of rows for the preview table.

    Pages are 1-based. A page past either end is clamped to the first or last
    page, and an empty dataset still reports a single (empty) page.
    """
    if page_size is None:
        page_size = settings.PREVIEW_PAGE_SIZE
    page_size = max(1, min(page_size, settings.PREVIEW_MAX_PAGE_SIZE))

    total_rows = len(dataset.rows)
    total_pages = max(1, math.ceil(total_rows / page_size))
    page = min(max(page, 1), total_pages)
    start = (page - 1) * page_size

    return RowPage(
        page=page,
        page_size=page_size,
        total_rows=total_rows,
        total_pages=total_pages,
        columns=dataset.columns,
        rows=dataset.rows[start:start + page_size],
    )
