"""
Kaiten MCP Server - task-tracker tools over stdio.

Tools:
- get_task_details: card fields plus a page of comments
- get_time_logs: time spent, flat or grouped by user/date
- get_task_status: status of up to 50 cards in one call
- create_task: create a card
- update_task: patch selected card fields

Configuration: KAITEN_BASE_URL and KAITEN_API_TOKEN (env or .env).
"""

import json
import logging
import sys
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from mcp.server.fastmcp import FastMCP
from mcp.types import CallToolResult, TextContent
from pydantic import Field

from kaiten_mcp.config import ConfigurationError, load_client_config, load_settings
from kaiten_mcp.models import OperationResult
from kaiten_mcp.operations import KaitenOperations
from kaiten_mcp.utils.logging import configure_logging

logger = logging.getLogger(__name__)

INSTRUCTIONS = """Kaiten task tracker access.

Cards are Kaiten tasks. States are reported as labels: "active" for state 1,
"unknown_N" for any other code N.

Use get_task_status for quick checks of many cards, get_task_details for the
full card of ONE task."""

CardId = Annotated[int, Field(gt=0, description="Card ID")]
Title = Annotated[str, Field(min_length=1, max_length=500, description="Card title, 1-500 characters")]
Description = Annotated[str, Field(max_length=50000, description="Plain text with line breaks, up to 50000 characters")]
PositiveId = Annotated[int, Field(gt=0)]
IdList = Annotated[list[PositiveId], Field(max_length=20)]


def _tool_result(result: OperationResult) -> CallToolResult:
    """JSON text on success; the bare message with isError on failure."""
    if not result.ok:
        return CallToolResult(content=[TextContent(type="text", text=result.error or "")], isError=True)
    text = json.dumps(result.data, ensure_ascii=False)
    return CallToolResult(content=[TextContent(type="text", text=text)])


async def _call(operations: KaitenOperations, operation: str, **arguments: Any) -> CallToolResult:
    """Run an operation; omitted (None) arguments are not forwarded."""
    supplied = {k: v for k, v in arguments.items() if v is not None}
    return _tool_result(await operations.execute(operation, supplied))


def build_server(operations: KaitenOperations) -> FastMCP:
    """Register the five Kaiten tools on a new FastMCP server."""
    mcp = FastMCP("kaiten", instructions=INSTRUCTIONS)

    @mcp.tool()
    async def get_task_details(
        card_id: CardId,
        include_comments: bool = True,
        comments_limit: Annotated[int, Field(ge=1, le=100)] = 20,
        comments_offset: Annotated[int, Field(ge=0)] = 0,
    ) -> CallToolResult:
        """
        Get full details of a Kaiten card: description, metadata, members and comments.

        Args:
            card_id: Card ID
            include_comments: Include a page of comments (default true)
            comments_limit: Comments per page, 1-100 (default 20)
            comments_offset: Comments to skip for pagination (default 0)

        Returns:
            Card fields; `comments` holds items, total, limit, offset, has_more
        """
        return await _call(
            operations,
            "get_task_details",
            card_id=card_id,
            include_comments=include_comments,
            comments_limit=comments_limit,
            comments_offset=comments_offset,
        )

    @mcp.tool()
    async def get_time_logs(
        card_id: CardId, group_by: Literal["none", "user", "date"] = "none"
    ) -> CallToolResult:
        """
        Get time logs of a Kaiten card with the total time spent.

        Args:
            card_id: Card ID
            group_by: none (flat list), user (per user) or date (per day)

        Returns:
            card_id, total_minutes and one of entries / by_user / by_date
        """
        return await _call(operations, "get_time_logs", card_id=card_id, group_by=group_by)

    @mcp.tool()
    async def get_task_status(
        card_ids: Annotated[list[PositiveId], Field(min_length=1, max_length=50)],
    ) -> CallToolResult:
        """
        Get the current status of one or more Kaiten cards (up to 50 per call).

        Each item has card_id, title, board_id, column_id, state, updated_at,
        or card_id and error when that card could not be read. An authentication
        failure aborts the whole request.

        Args:
            card_ids: 1 to 50 card IDs
        """
        return await _call(operations, "get_task_status", card_ids=card_ids)

    @mcp.tool()
    async def create_task(
        title: Title,
        board_id: PositiveId,
        column_id: PositiveId,
        description: Description | None = None,
        lane_id: PositiveId | None = None,
        position: Literal[1, 2] | None = None,
        tags: IdList | None = None,
    ) -> CallToolResult:
        """
        Create a new Kaiten card.

        Args:
            title: Card title, 1-500 characters
            board_id: Board to create the card on
            column_id: Column on that board
            description: Plain text with line breaks, up to 50000 characters
            lane_id: Lane on the board
            position: 1 = top of the column, 2 = bottom
            tags: Up to 20 tag IDs

        Returns:
            The created card as stored by Kaiten
        """
        return await _call(
            operations,
            "create_task",
            title=title,
            board_id=board_id,
            column_id=column_id,
            description=description,
            lane_id=lane_id,
            position=position,
            tags=tags,
        )

    @mcp.tool()
    async def update_task(
        card_id: CardId,
        title: Title | None = None,
        description: Description | None = None,
        column_id: PositiveId | None = None,
        lane_id: PositiveId | None = None,
        owner_id: PositiveId | None = None,
        members: IdList | None = None,
        tags: IdList | None = None,
    ) -> CallToolResult:
        """
        Update fields of an existing Kaiten card. Pass only the fields to change.

        Cards cannot be moved between boards.

        Args:
            card_id: Card to update
            title: New title, 1-500 characters
            description: New description, up to 50000 characters
            column_id: Column to move the card to
            lane_id: Lane to move the card to
            owner_id: New owner user ID
            members: Up to 20 member user IDs
            tags: Up to 20 tag IDs

        Returns:
            The full card after the update
        """
        return await _call(
            operations,
            "update_task",
            card_id=card_id,
            title=title,
            description=description,
            column_id=column_id,
            lane_id=lane_id,
            owner_id=owner_id,
            members=members,
            tags=tags,
        )

    return mcp


def main() -> None:
    """Entry point for the Kaiten MCP server."""
    load_dotenv()

    try:
        settings = load_settings()
        config = load_client_config(settings)
    except ConfigurationError as e:
        configure_logging()
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.LOG_LEVEL, use_json=settings.LOG_JSON)
    server = build_server(KaitenOperations(config))
    logger.info("Starting Kaiten MCP server, API: %s", config.base_url)
    server.run()


if __name__ == "__main__":
    main()
