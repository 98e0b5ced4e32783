"""HTTP transport for the prediction backend."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pyfiremap._constants import USER_AGENT
from pyfiremap._redact import redact_for_log
from pyfiremap.config import FireMapConfig
from pyfiremap.exceptions import FireMapTransportError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles while
    keeping the production implementation (`JsonTransport`) concrete.
    """

    async def get_json(self, endpoint: str) -> Any:
        ...

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        ...


class JsonTransport:
    """Plain JSON-over-HTTP transport against ``config.backend_url``."""

    def __init__(self, config: FireMapConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session
        self._timeout = (
            aiohttp.ClientTimeout(total=config.request_timeout) if config.request_timeout is not None else None
        )

    async def get_json(self, endpoint: str) -> Any:
        """``GET`` *endpoint* and return the decoded JSON body."""
        return await self._request("GET", endpoint)

    async def post_json(self, endpoint: str, payload: Mapping[str, Any]) -> Any:
        """``POST`` *payload* as JSON to *endpoint* and return the decoded body."""
        return await self._request("POST", endpoint, payload)

    async def _request(self, method: str, endpoint: str, payload: Mapping[str, Any] | None = None) -> Any:
        headers: dict[str, str] = {
            "accept": "application/json",
            "user-agent": USER_AGENT,
        }
        body: str | None = None
        if payload is not None:
            headers["content-type"] = "application/json"
            body = json.dumps(dict(payload))

        url = f"{self._config.backend_url}{endpoint}"
        _logger.debug("%s %s %s", method, url, redact_for_log(payload))

        kwargs: dict[str, Any] = {"data": body, "headers": headers}
        if self._timeout is not None:
            kwargs["timeout"] = self._timeout

        try:
            async with self._http.request(method, url, **kwargs) as resp:
                content = await resp.read()
                text = content.decode("utf-8", errors="replace")
                if not 200 <= resp.status < 300:
                    raise FireMapTransportError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
        except FireMapTransportError:
            raise
        except (aiohttp.ClientError, TimeoutError) as exc:
            raise FireMapTransportError(
                f"Request to {endpoint} failed: {exc!r}",
                endpoint=endpoint,
            ) from exc

        try:
            return json.loads(content)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise FireMapTransportError(
                f"Invalid JSON from {endpoint}: {text[:200]}",
                endpoint=endpoint,
            ) from exc
