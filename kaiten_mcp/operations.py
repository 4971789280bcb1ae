from __future__ import annotations
from typing import Any, Awaitable, Callable, Dict, Tuple, Type
import logging
import time
from pydantic import BaseModel, ValidationError
from kaiten_mcp.aggregation import aggregate_time_logs, paginate_comments
from kaiten_mcp.batch import resolve_statuses
from kaiten_mcp.config import ClientConfig
from kaiten_mcp.integrations.kaiten_client import ErrorKind, KaitenAPIError, KaitenClient
from kaiten_mcp.integrations.kaiten_types import CardCreate
from kaiten_mcp.models import (
    CreateTaskParams,
    GetTaskDetailsParams,
    GetTaskStatusParams,
    GetTimeLogsParams,
    OperationResult,
    UpdateTaskParams,
)
from kaiten_mcp.normalizer import normalize_card, normalize_comment, normalize_time_log
from kaiten_mcp.utils.ids import operation_id

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def validation_message(error: ValidationError) -> str:
    """Flatten pydantic errors into one readable line."""
    parts = []
    for err in error.errors():
        location = ".".join(str(p) for p in err["loc"]) or "arguments"
        parts.append(f"{location}: {err['msg']}")
    return "Invalid parameters: " + "; ".join(parts)


class KaitenOperations:
    """
    The five task operations.
    Each returns an OperationResult; no exception escapes to the caller.
    """

    def __init__(self, config: ClientConfig, client: KaitenClient | None = None):
        self.config = config
        self.client = client or KaitenClient(config)
        self._operations: Dict[str, Tuple[Type[BaseModel], Callable[[Any], Awaitable[OperationResult]]]] = {
            "get_task_details": (GetTaskDetailsParams, self.get_task_details),
            "get_time_logs": (GetTimeLogsParams, self.get_time_logs),
            "get_task_status": (GetTaskStatusParams, self.get_task_status),
            "create_task": (CreateTaskParams, self.create_task),
            "update_task": (UpdateTaskParams, self.update_task),
        }

    @property
    def operation_names(self) -> list[str]:
        return list(self._operations)

    async def execute(self, operation: str, arguments: Dict[str, Any]) -> OperationResult:
        """Validate raw arguments for the named operation and run it."""
        if operation not in self._operations:
            return OperationResult.failure(f"Unknown operation: {operation}")

        params_model, handler = self._operations[operation]
        try:
            params = params_model(**arguments)
        except ValidationError as e:
            return OperationResult.failure(validation_message(e))
        return await handler(params)

    async def _run(
        self, operation: str, action: Callable[[], Awaitable[Any]]
    ) -> OperationResult:
        """Run one operation, converting every failure into an error result."""
        op_id = operation_id()
        extra = {"request_id": op_id, "operation": operation}
        logger.info(f"Operation started: {operation}", extra=extra)
        start_time = time.time()

        try:
            data = await action()
        except KaitenAPIError as e:
            error_extra = {**extra, "path": e.path, "status": e.status_code}
            if e.kind is ErrorKind.AUTHENTICATION:
                logger.error(f"Operation {operation} rejected: {e.message}", extra=error_extra)
            else:
                logger.warning(
                    f"Operation {operation} failed ({e.kind.value}): {e.message}",
                    extra=error_extra,
                )
            return OperationResult.failure(e.message)
        except Exception as e:
            logger.error(f"Operation {operation} crashed: {e}", extra=extra, exc_info=True)
            return OperationResult.failure(INTERNAL_ERROR_MESSAGE)

        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            f"Operation completed: {operation}",
            extra={**extra, "duration_ms": round(duration_ms, 2)},
        )
        return OperationResult.success(data)

    async def get_task_details(self, params: GetTaskDetailsParams) -> OperationResult:
        """Card details, with a page of comments when include_comments is set."""
        async def action():
            details = normalize_card(await self.client.get_card(params.card_id))
            if params.include_comments:
                comments = await self.client.list_comments(params.card_id)
                details.comments = paginate_comments(
                    [normalize_comment(c) for c in comments],
                    limit=params.comments_limit,
                    offset=params.comments_offset,
                )
            return details.to_payload()

        return await self._run("get_task_details", action)

    async def get_time_logs(self, params: GetTimeLogsParams) -> OperationResult:
        """Time logs of one card, flat or grouped, with the total minutes."""
        async def action():
            raw = await self.client.list_time_logs(params.card_id)
            entries = [normalize_time_log(t) for t in raw]
            return aggregate_time_logs(params.card_id, entries, params.group_by).model_dump()

        return await self._run("get_time_logs", action)

    async def get_task_status(self, params: GetTaskStatusParams) -> OperationResult:
        """Lightweight status for up to 50 cards; per-card errors are returned inline."""
        async def action():
            records = await resolve_statuses(self.client, params.card_ids)
            return [r.model_dump() for r in records]

        return await self._run("get_task_status", action)

    async def create_task(self, params: CreateTaskParams) -> OperationResult:
        """Create a card and return it as the server stored it."""
        async def action():
            body = CardCreate(**params.model_dump(exclude_unset=True, exclude_none=True))
            created = await self.client.create_card(body)
            return normalize_card(created).to_payload()

        return await self._run("create_task", action)

    async def update_task(self, params: UpdateTaskParams) -> OperationResult:
        """Patch only the supplied fields and return the card after the write."""
        async def action():
            updated = await self.client.update_card(params.card_id, params.to_update())
            return normalize_card(updated).to_payload()

        return await self._run("update_task", action)
