"""
Client-side paging and grouping.

The Kaiten API returns comments and time logs as one unpaginated array, so
slicing and summation happen here, after the whole collection is fetched.
"""
from __future__ import annotations
import enum
from typing import Callable, Dict, Hashable, List, Sequence, Union
from pydantic import BaseModel
from kaiten_mcp.normalizer import CommentItem, CommentsPage, TimeLogEntry

MAX_PAGE_LIMIT = 100


class GroupBy(str, enum.Enum):
    NONE = "none"
    USER = "user"
    DATE = "date"


class UserGroup(BaseModel):
    user_id: int
    total_minutes: int
    entries: List[TimeLogEntry]


class DateGroup(BaseModel):
    for_date: str
    total_minutes: int
    entries: List[TimeLogEntry]


class TimeLogs(BaseModel):
    card_id: int
    total_minutes: int
    entries: List[TimeLogEntry]


class TimeLogsByUser(BaseModel):
    card_id: int
    total_minutes: int
    by_user: List[UserGroup]


class TimeLogsByDate(BaseModel):
    card_id: int
    total_minutes: int
    by_date: List[DateGroup]


TimeLogsResult = Union[TimeLogs, TimeLogsByUser, TimeLogsByDate]


def paginate_comments(
    comments: Sequence[CommentItem], limit: int, offset: int
) -> CommentsPage:
    """
    Slice [offset, offset + limit) out of the full collection.

    `total` counts the whole collection, not the slice. An offset past the end
    gives an empty page with has_more=False.
    """
    if not 1 <= limit <= MAX_PAGE_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_PAGE_LIMIT}, got {limit}")
    if offset < 0:
        raise ValueError(f"offset must be >= 0, got {offset}")

    total = len(comments)
    items = list(comments[offset:offset + limit])
    return CommentsPage(
        items=items,
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(items) < total,
    )


def total_minutes(entries: Sequence[TimeLogEntry]) -> int:
    return sum(e.time_spent for e in entries)


def group_entries(
    entries: Sequence[TimeLogEntry], key: Callable[[TimeLogEntry], Hashable]
) -> Dict[Hashable, List[TimeLogEntry]]:
    """Partition entries by key. Groups keep first-seen order, entries keep input order."""
    groups: Dict[Hashable, List[TimeLogEntry]] = {}
    for entry in entries:
        groups.setdefault(key(entry), []).append(entry)
    return groups


def aggregate_time_logs(
    card_id: int, entries: Sequence[TimeLogEntry], group_by: GroupBy = GroupBy.NONE
) -> TimeLogsResult:
    """Sum time spent and present entries flat or grouped by user or date."""
    total = total_minutes(entries)
    group_by = GroupBy(group_by)

    if group_by is GroupBy.USER:
        groups = group_entries(entries, lambda e: e.user_id)
        return TimeLogsByUser(
            card_id=card_id,
            total_minutes=total,
            by_user=[
                UserGroup(user_id=user_id, total_minutes=total_minutes(items), entries=items)
                for user_id, items in groups.items()
            ],
        )

    if group_by is GroupBy.DATE:
        groups = group_entries(entries, lambda e: e.for_date)
        return TimeLogsByDate(
            card_id=card_id,
            total_minutes=total,
            by_date=[
                DateGroup(for_date=for_date, total_minutes=total_minutes(items), entries=items)
                for for_date, items in groups.items()
            ],
        )

    return TimeLogs(card_id=card_id, total_minutes=total, entries=list(entries))
