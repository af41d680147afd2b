"""Shared plumbing for the resource services."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional

from ..models import Pagination
from ..strava_client.dispatcher import Dispatcher

DEFAULT_PAGE_SIZE = 30
MAX_PAGE_SIZE = 200


class Service:
    def __init__(self, dispatcher: Dispatcher) -> None:
        self._dispatcher = dispatcher


def page_params(
    pagination: Optional[Pagination] = None, **extra: Any
) -> Dict[str, Any]:
    params: Dict[str, Any] = dict(pagination.to_params()) if pagination else {}
    for key, value in extra.items():
        if value is not None and value != 0:
            params[key] = value
    return params


def iter_pages(
    fetch: Callable[[Pagination], List[Any]],
    per_page: int = MAX_PAGE_SIZE,
    max_pages: Optional[int] = None,
    start_page: int = 1,
) -> Iterator[Any]:
    """Yield items across pages until a short page (or ``max_pages``)."""

    if per_page < 1:
        raise ValueError("per_page must be >= 1")
    page = start_page
    fetched = 0
    while max_pages is None or fetched < max_pages:
        items = fetch(Pagination(page=page, per_page=per_page)) or []
        fetched += 1
        yield from items
        if len(items) < per_page:
            return
        page += 1
