"""
Concurrent status lookup for many cards.

Every id is fetched independently. Results are joined only after all requests
settle, then classified: success, recoverable failure (kept as an error record),
or fatal failure (authentication), which discards the whole batch.
"""
from __future__ import annotations
import asyncio
import logging
from typing import List, Sequence, Union
from pydantic import BaseModel
from kaiten_mcp.integrations.kaiten_client import KaitenAPIError, KaitenClient
from kaiten_mcp.normalizer import normalize_card

logger = logging.getLogger(__name__)

MAX_BATCH_SIZE = 50
UNKNOWN_ERROR_MESSAGE = "Unknown error"


class TaskStatus(BaseModel):
    card_id: int
    title: str
    board_id: int
    column_id: int
    state: str
    updated_at: str


class TaskStatusError(BaseModel):
    card_id: int
    error: str


StatusRecord = Union[TaskStatus, TaskStatusError]


async def _fetch_status(client: KaitenClient, card_id: int) -> TaskStatus:
    card = normalize_card(await client.get_card(card_id))
    return TaskStatus(
        card_id=card.card_id,
        title=card.title,
        board_id=card.board_id,
        column_id=card.column_id,
        state=card.state,
        updated_at=card.updated_at,
    )


async def resolve_statuses(client: KaitenClient, card_ids: Sequence[int]) -> List[StatusRecord]:
    """
    Resolve the status of every card id, in input order.

    Raises the first authentication KaitenAPIError (in input order) if any
    request hit one; otherwise each failure becomes a TaskStatusError.
    """
    if not card_ids:
        raise ValueError("card_ids must not be empty")
    if len(card_ids) > MAX_BATCH_SIZE:
        raise ValueError(f"At most {MAX_BATCH_SIZE} card ids per batch, got {len(card_ids)}")

    results = await asyncio.gather(
        *(_fetch_status(client, card_id) for card_id in card_ids),
        return_exceptions=True,
    )

    for result in results:
        if isinstance(result, KaitenAPIError) and result.is_fatal:
            raise result

    records: List[StatusRecord] = []
    for card_id, result in zip(card_ids, results):
        if isinstance(result, TaskStatus):
            records.append(result)
        elif isinstance(result, KaitenAPIError):
            records.append(TaskStatusError(card_id=card_id, error=result.message))
        elif isinstance(result, Exception):
            logger.warning(
                f"Status lookup failed for card {card_id}: {result!r}",
                extra={"card_id": card_id},
            )
            records.append(TaskStatusError(card_id=card_id, error=UNKNOWN_ERROR_MESSAGE))
        else:
            # BaseException such as CancelledError is not a per-card failure
            raise result

    failed = sum(isinstance(r, TaskStatusError) for r in records)
    logger.info(f"Resolved {len(records)} card statuses ({failed} failed)")
    return records
