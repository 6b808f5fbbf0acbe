"""Helpers for reading through Protean querysets page by page."""

PAGE_SIZE = 100


def fetch_all(queryset, page_size: int = PAGE_SIZE) -> list:
    """Every record matched by ``queryset``, past the default query limit."""
    records = []
    offset = 0
    while True:
        page = queryset.offset(offset).limit(page_size).all()
        records.extend(page.items)
        if len(page.items) < page_size:
            return records
        offset += page_size


def paginate(queryset, page: int, limit: int):
    """Return ``(items, total)`` for a 1-based page of ``queryset``."""
    result = queryset.offset((page - 1) * limit).limit(limit).all()
    return result.items, result.total
