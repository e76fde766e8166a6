"""Page/limit parsing for list endpoints."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from sqlalchemy import func, select

from ..extensions import db

DEFAULT_LIMIT = 10
MAX_LIMIT = 100


def _positive_int(value: Any, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number > 0 else default


@dataclass
class Page:
    items: list[Any]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    def to_dict(self, key: str, serialize: Callable[[Any], dict] | None = None) -> dict[str, Any]:
        items = [serialize(item) for item in self.items] if serialize else list(self.items)
        return {
            key: items,
            'count': len(items),
            'pagination': {'current': self.page, 'pages': self.pages, 'total': self.total},
        }


def page_args(args: Mapping[str, Any]) -> tuple[int, int]:
    """Return ``(page, limit)`` with defaults and the upper bound applied."""

    page = _positive_int(args.get('page'), 1)
    limit = min(_positive_int(args.get('limit'), DEFAULT_LIMIT), MAX_LIMIT)
    return page, limit


def paginate(stmt, args: Mapping[str, Any]) -> Page:
    """Run ``stmt`` for one page and count the full result set."""

    page, limit = page_args(args)
    total = db.session.scalar(select(func.count()).select_from(stmt.order_by(None).subquery()))
    items = db.session.scalars(stmt.limit(limit).offset((page - 1) * limit)).unique().all()
    return Page(items=list(items), total=total or 0, page=page, limit=limit)

