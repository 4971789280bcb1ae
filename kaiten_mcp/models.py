from pydantic import BaseModel, ConfigDict, Field, PositiveInt
from typing import Any, List, Optional
from kaiten_mcp.aggregation import GroupBy, MAX_PAGE_LIMIT
from kaiten_mcp.batch import MAX_BATCH_SIZE
from kaiten_mcp.integrations.kaiten_types import CardCreate, CardUpdate


class GetTaskDetailsParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    card_id: PositiveInt
    include_comments: bool = True
    comments_limit: int = Field(default=20, ge=1, le=MAX_PAGE_LIMIT)
    comments_offset: int = Field(default=0, ge=0)


class GetTimeLogsParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    card_id: PositiveInt
    group_by: GroupBy = GroupBy.NONE


class GetTaskStatusParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    card_ids: List[PositiveInt] = Field(min_length=1, max_length=MAX_BATCH_SIZE)


class CreateTaskParams(CardCreate):
    pass


class UpdateTaskParams(CardUpdate):
    card_id: PositiveInt

    def to_update(self) -> CardUpdate:
        """Write payload: only the fields the caller supplied, never card_id."""
        fields = self.model_dump(exclude={"card_id"}, exclude_unset=True, exclude_none=True)
        return CardUpdate(**fields)


# Operation result envelope
class OperationResult(BaseModel):
    """
    Two-shape result of every operation: data on success, a single
    human-readable message on failure. No error codes cross this boundary.
    """
    ok: bool
    data: Optional[Any] = None
    error: Optional[str] = None

    @classmethod
    def success(cls, data: Any = None) -> "OperationResult":
        return cls(ok=True, data=data)

    @classmethod
    def failure(cls, message: str) -> "OperationResult":
        return cls(ok=False, error=message)
