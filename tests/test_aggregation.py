"""
Tests for comment paging and time-log aggregation.
"""
import pytest
from kaiten_mcp.aggregation import (
    GroupBy,
    TimeLogs,
    TimeLogsByDate,
    TimeLogsByUser,
    aggregate_time_logs,
    paginate_comments,
)
from kaiten_mcp.normalizer import CommentItem, TimeLogEntry


def comments(count):
    return [
        CommentItem(
            id=i,
            author_id=1,
            text=f"c{i}",
            created_at="2026-02-01T00:00:00Z",
            updated_at="2026-02-01T00:00:00Z",
        )
        for i in range(count)
    ]


def entry(entry_id, user_id, minutes, for_date):
    return TimeLogEntry(
        id=entry_id,
        user_id=user_id,
        author_id=user_id,
        time_spent=minutes,
        for_date=for_date,
        comment=None,
        created_at="2026-02-12T18:00:00Z",
    )


SAMPLE_LOGS = [
    entry(1, 501, 120, "2026-02-10"),
    entry(2, 502, 90, "2026-02-10"),
    entry(3, 501, 60, "2026-02-11"),
]


def test_first_page():
    page = paginate_comments(comments(5), limit=2, offset=0)

    assert [c.id for c in page.items] == [0, 1]
    assert page.total == 5
    assert page.limit == 2
    assert page.offset == 0
    assert page.has_more is True


def test_last_page_exact_end():
    """has_more is false when the slice reaches the end exactly."""
    page = paginate_comments(comments(4), limit=2, offset=2)

    assert [c.id for c in page.items] == [2, 3]
    assert page.has_more is False


def test_partial_last_page():
    page = paginate_comments(comments(5), limit=3, offset=3)

    assert [c.id for c in page.items] == [3, 4]
    assert page.has_more is False


def test_offset_beyond_total():
    """Out-of-range offsets give an empty page, not an error."""
    page = paginate_comments(comments(3), limit=20, offset=50)

    assert page.items == []
    assert page.total == 3
    assert page.has_more is False


def test_empty_collection():
    page = paginate_comments([], limit=20, offset=0)

    assert page.items == []
    assert page.total == 0
    assert page.has_more is False


@pytest.mark.parametrize("total,limit,offset", [(0, 1, 0), (7, 3, 0), (7, 3, 6), (7, 100, 1), (7, 1, 7), (10, 10, 0)])
def test_page_invariants(total, limit, offset):
    """Item count and has_more follow from total, limit and offset alone."""
    page = paginate_comments(comments(total), limit=limit, offset=offset)

    expected = max(0, min(limit, total - offset)) if offset < total else 0
    assert len(page.items) == expected
    assert page.has_more == (offset + len(page.items) < total)


@pytest.mark.parametrize("limit,offset", [(0, 0), (101, 0), (10, -1)])
def test_invalid_paging_arguments(limit, offset):
    with pytest.raises(ValueError):
        paginate_comments(comments(3), limit=limit, offset=offset)


def test_flat_time_logs():
    result = aggregate_time_logs(12345, SAMPLE_LOGS, GroupBy.NONE)

    assert isinstance(result, TimeLogs)
    assert result.card_id == 12345
    assert result.total_minutes == 270
    assert [e.id for e in result.entries] == [1, 2, 3]


def test_group_by_user():
    """Groups appear in first-seen order with their own subtotals."""
    result = aggregate_time_logs(12345, SAMPLE_LOGS, GroupBy.USER)

    assert isinstance(result, TimeLogsByUser)
    assert result.total_minutes == 270
    assert [(g.user_id, g.total_minutes, [e.id for e in g.entries]) for g in result.by_user] == [
        (501, 180, [1, 3]),
        (502, 90, [2]),
    ]


def test_group_by_date():
    result = aggregate_time_logs(12345, SAMPLE_LOGS, "date")

    assert isinstance(result, TimeLogsByDate)
    assert [(g.for_date, g.total_minutes, [e.id for e in g.entries]) for g in result.by_date] == [
        ("2026-02-10", 210, [1, 2]),
        ("2026-02-11", 60, [3]),
    ]


def test_empty_time_logs():
    result = aggregate_time_logs(1, [], GroupBy.USER)

    assert result.total_minutes == 0
    assert result.by_user == []


def test_grouping_conserves_total():
    """Flat, by-user and by-date totals agree and every entry lands in one group."""
    logs = [
        entry(i, 500 + i % 3, (i * 37) % 240, f"2026-03-{1 + i % 5:02d}")
        for i in range(1, 30)
    ]

    flat = aggregate_time_logs(1, logs, GroupBy.NONE)
    by_user = aggregate_time_logs(1, logs, GroupBy.USER)
    by_date = aggregate_time_logs(1, logs, GroupBy.DATE)

    assert sum(g.total_minutes for g in by_user.by_user) == flat.total_minutes
    assert sum(g.total_minutes for g in by_date.by_date) == flat.total_minutes
    assert by_user.total_minutes == by_date.total_minutes == flat.total_minutes
    assert sorted(e.id for g in by_user.by_user for e in g.entries) == list(range(1, 30))
    assert sorted(e.id for g in by_date.by_date for e in g.entries) == list(range(1, 30))
