"""Async JSON-RPC 2.0 transport shared by client collaborators."""
from __future__ import annotations

import logging
import time
from typing import Any, Optional

import httpx

from .exceptions import RPCError
from .logging_utils import mask_url

logger = logging.getLogger(__name__)


class JsonRpcTransport:
    """Minimal JSON-RPC client over httpx.

    A caller-supplied ``httpx.AsyncClient`` is used as-is (tests pass one
    built on ``httpx.MockTransport``) and is not closed by :meth:`close`.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not url:
            raise ValueError("JSON-RPC transport requires a URL")
        self.url = url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._request_id = 0

    async def call(self, method: str, params: Optional[list[Any]] = None) -> Any:
        """Make a JSON-RPC call and return its ``result``.

        Raises:
            RPCError: On transport failure, HTTP error status or a JSON-RPC error.
        """
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params or [],
        }
        start = time.monotonic()
        try:
            resp = await self._client.post(self.url, json=payload)
            resp.raise_for_status()
            data = resp.json()
        except httpx.HTTPStatusError as exc:
            raise RPCError(
                f"{method} failed with HTTP {exc.response.status_code}",
                code=exc.response.status_code,
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise RPCError(f"{method} request failed: {exc}") from exc
        finally:
            logger.debug(
                "RPC %s to %s took %.1fms",
                method,
                mask_url(self.url),
                (time.monotonic() - start) * 1000,
            )

        if data.get("error"):
            error = data["error"]
            raise RPCError(
                error.get("message", "Unknown RPC error"),
                code=error.get("code"),
                data=error.get("data"),
            )
        return data.get("result")

    async def close(self) -> None:
        """Close the HTTP client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()


__all__ = ["JsonRpcTransport"]
