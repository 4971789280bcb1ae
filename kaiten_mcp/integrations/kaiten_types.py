"""
Pydantic models for Kaiten API types.
Raw response shapes for cards, comments and time logs, plus write payloads.
"""
from typing import List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, PositiveInt


class KaitenMember(BaseModel):
    """Card member."""
    id: int
    full_name: str


class KaitenTag(BaseModel):
    """Card tag."""
    id: int
    name: str


class KaitenCard(BaseModel):
    """GET /cards/{card_id}"""
    id: int
    title: str
    description: Optional[str] = None
    state: int
    board_id: int
    column_id: int
    lane_id: Optional[int] = None
    owner_id: Optional[int] = None
    members: List[KaitenMember] = Field(default_factory=list)
    tags: List[KaitenTag] = Field(default_factory=list)
    created: str  # ISO 8601
    updated: str  # ISO 8601


class KaitenComment(BaseModel):
    """GET /cards/{card_id}/comments -- array element"""
    id: int
    text: str
    author_id: int
    card_id: Optional[int] = None
    created: str
    updated: str


class KaitenTimeLog(BaseModel):
    """GET /cards/{card_id}/time-logs -- array element"""
    id: int
    card_id: Optional[int] = None
    user_id: int
    author_id: int
    role_id: Optional[int] = None
    time_spent: int  # minutes
    for_date: str  # YYYY-MM-DD, the day the work applies to
    comment: Optional[str] = None
    created: str  # when the record itself was created
    updated: Optional[str] = None


class CardCreate(BaseModel):
    """Request body for creating a card."""
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=500)
    board_id: PositiveInt
    column_id: PositiveInt
    description: Optional[str] = Field(default=None, max_length=50000)
    lane_id: Optional[PositiveInt] = None
    position: Optional[Literal[1, 2]] = None  # 1 = top of column, 2 = bottom
    tags: Optional[List[PositiveInt]] = Field(default=None, max_length=20)


class CardUpdate(BaseModel):
    """Request body for a partial card update. Omitted fields are not sent."""
    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = Field(default=None, min_length=1, max_length=500)
    description: Optional[str] = Field(default=None, max_length=50000)
    column_id: Optional[PositiveInt] = None
    lane_id: Optional[PositiveInt] = None
    owner_id: Optional[PositiveInt] = None
    members: Optional[List[PositiveInt]] = Field(default=None, max_length=20)
    tags: Optional[List[PositiveInt]] = Field(default=None, max_length=20)
