"""
Async Kaiten API client with uniform error mapping.

Every failure (HTTP status, timeout, transport) surfaces as KaitenAPIError.
There are no retries: one failed attempt is raised immediately.
"""
from __future__ import annotations
import asyncio
import enum
import logging
from typing import Any, Dict, List, Optional
import httpx
from kaiten_mcp.config import ClientConfig
from kaiten_mcp.utils.http import create_http_client
from kaiten_mcp.integrations.kaiten_types import (
    CardCreate,
    CardUpdate,
    KaitenCard,
    KaitenComment,
    KaitenTimeLog,
)

logger = logging.getLogger(__name__)

TIMEOUT_MESSAGE = "Timed out waiting for a response from Kaiten API"


class ErrorKind(str, enum.Enum):
    """Failure classification carried by every KaitenAPIError."""
    AUTHENTICATION = "authentication"
    ACCESS_DENIED = "access_denied"
    NOT_FOUND = "not_found"
    REMOTE = "remote"
    TIMEOUT = "timeout"
    NETWORK = "network"


_STATUS_ERRORS: Dict[int, tuple[ErrorKind, str]] = {
    401: (ErrorKind.AUTHENTICATION, "Authentication failed. Check KAITEN_API_TOKEN"),
    403: (ErrorKind.ACCESS_DENIED, "Access to the card is denied"),
    404: (ErrorKind.NOT_FOUND, "Card not found"),
}


class KaitenAPIError(Exception):
    """
    Single failure type for Kaiten API calls.
    status_code is 0 when no response was ever received (timeout, network).
    """
    def __init__(self, message: str, status_code: int, path: str, kind: ErrorKind):
        self.message = message
        self.status_code = status_code
        self.path = path
        self.kind = kind
        super().__init__(message)

    @classmethod
    def from_status(cls, status_code: int, path: str) -> "KaitenAPIError":
        kind, message = _STATUS_ERRORS.get(
            status_code, (ErrorKind.REMOTE, f"Kaiten API error: {status_code}")
        )
        return cls(message, status_code, path, kind)

    @classmethod
    def timeout(cls, path: str) -> "KaitenAPIError":
        return cls(TIMEOUT_MESSAGE, 0, path, ErrorKind.TIMEOUT)

    @classmethod
    def network(cls, path: str, cause: Exception) -> "KaitenAPIError":
        return cls(f"Network error: {cause}", 0, path, ErrorKind.NETWORK)

    @property
    def is_fatal(self) -> bool:
        """An invalid credential fails every request alike."""
        return self.kind is ErrorKind.AUTHENTICATION


class KaitenClient:
    """Async Kaiten API client."""

    def __init__(self, config: ClientConfig):
        self.base_url = config.base_url.rstrip("/")
        self.token = config.token
        self.timeout = config.timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _send(
        self, method: str, path: str, json_body: Optional[Dict[str, Any]]
    ) -> Any:
        async with create_http_client(timeout=self.timeout) as client:
            response = await client.request(
                method.upper(),
                f"{self.base_url}{path}",
                headers=self._headers(),
                json=json_body,
            )

            if not response.is_success:
                logger.warning(
                    f"Kaiten API returned {response.status_code} for {method} {path}",
                    extra={"path": path, "status": response.status_code},
                )
                raise KaitenAPIError.from_status(response.status_code, path)

            return response.json()

    async def _request(
        self,
        path: str,
        method: str = "GET",
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """
        Make one authenticated request and return the parsed JSON body.
        The whole exchange, body included, is bounded by self.timeout.
        Maps every failure to KaitenAPIError.
        """
        logger.debug(f"Kaiten request: {method} {path}", extra={"path": path})

        try:
            return await asyncio.wait_for(self._send(method, path, json_body), self.timeout)
        except KaitenAPIError:
            raise
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"Kaiten timeout on {method} {path}", extra={"path": path, "status": 0})
            raise KaitenAPIError.timeout(path) from e
        except (httpx.HTTPError, ValueError) as e:
            # ValueError: the body of a 2xx response was not valid JSON
            logger.warning(f"Kaiten call failed on {method} {path}: {e}", extra={"path": path, "status": 0})
            raise KaitenAPIError.network(path, e) from e

    async def get_card(self, card_id: int) -> KaitenCard:
        """Get one card."""
        data = await self._request(f"/cards/{card_id}")
        return KaitenCard(**data)

    async def list_comments(self, card_id: int) -> List[KaitenComment]:
        """Get every comment of a card. The API has no server-side paging here."""
        data = await self._request(f"/cards/{card_id}/comments")
        return [KaitenComment(**c) for c in data]

    async def list_time_logs(self, card_id: int) -> List[KaitenTimeLog]:
        """Get every time log entry of a card."""
        data = await self._request(f"/cards/{card_id}/time-logs")
        return [KaitenTimeLog(**t) for t in data]

    async def create_card(self, body: CardCreate) -> KaitenCard:
        """Create a card."""
        data = await self._request(
            "/cards",
            "POST",
            json_body=body.model_dump(exclude_none=True),
        )
        return KaitenCard(**data)

    async def update_card(self, card_id: int, body: CardUpdate) -> KaitenCard:
        """Patch a card. Only fields set on the body are sent."""
        data = await self._request(
            f"/cards/{card_id}",
            "PATCH",
            json_body=body.model_dump(exclude_none=True),
        )
        return KaitenCard(**data)
