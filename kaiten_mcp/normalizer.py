"""
Mapping from raw Kaiten payloads to the stable output schema.

Pure functions, no I/O. Nullable fields stay nullable, list order is preserved.
"""
from typing import Dict, List, Optional
from pydantic import BaseModel
from kaiten_mcp.integrations.kaiten_types import (
    KaitenCard,
    KaitenComment,
    KaitenTimeLog,
)

# Only one code is documented by the API so far
STATE_LABELS: Dict[int, str] = {
    1: "active",
}


def map_state(state: int) -> str:
    """Label for a state code; unknown codes become unknown_<code>."""
    label = STATE_LABELS.get(state)
    if label is None:
        return f"unknown_{state}"
    return label


class Member(BaseModel):
    id: int
    full_name: str


class Tag(BaseModel):
    id: int
    name: str


class CommentItem(BaseModel):
    id: int
    author_id: int
    text: str
    created_at: str
    updated_at: str


class CommentsPage(BaseModel):
    items: List[CommentItem]
    total: int
    limit: int
    offset: int
    has_more: bool


class TaskDetails(BaseModel):
    """Normalized card. `comments` is only present when requested."""
    card_id: int
    title: str
    description: Optional[str]
    state: str
    board_id: int
    column_id: int
    lane_id: Optional[int]
    owner_id: Optional[int]
    members: List[Member]
    tags: List[Tag]
    created_at: str
    updated_at: str
    comments: Optional[CommentsPage] = None

    def to_payload(self) -> dict:
        """JSON-ready dict; drops `comments` entirely when no page was attached."""
        exclude = None if self.comments is not None else {"comments"}
        return self.model_dump(exclude=exclude)


class TimeLogEntry(BaseModel):
    id: int
    user_id: int
    author_id: int
    time_spent: int
    for_date: str
    comment: Optional[str]
    created_at: str


def normalize_card(raw: KaitenCard) -> TaskDetails:
    return TaskDetails(
        card_id=raw.id,
        title=raw.title,
        description=raw.description,
        state=map_state(raw.state),
        board_id=raw.board_id,
        column_id=raw.column_id,
        lane_id=raw.lane_id,
        owner_id=raw.owner_id,
        members=[Member(id=m.id, full_name=m.full_name) for m in raw.members],
        tags=[Tag(id=t.id, name=t.name) for t in raw.tags],
        created_at=raw.created,
        updated_at=raw.updated,
    )


def normalize_comment(raw: KaitenComment) -> CommentItem:
    return CommentItem(
        id=raw.id,
        author_id=raw.author_id,
        text=raw.text,
        created_at=raw.created,
        updated_at=raw.updated,
    )


def normalize_time_log(raw: KaitenTimeLog) -> TimeLogEntry:
    # for_date is the day worked; created is when the entry was logged
    return TimeLogEntry(
        id=raw.id,
        user_id=raw.user_id,
        author_id=raw.author_id,
        time_spent=raw.time_spent,
        for_date=raw.for_date,
        comment=raw.comment,
        created_at=raw.created,
    )
