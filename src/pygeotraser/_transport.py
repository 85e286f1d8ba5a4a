"""HTTP transport for the remote collector."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from pygeotraser._redact import redact_for_log
from pygeotraser.config import GeotraserConfig
from pygeotraser.exceptions import DeliveryError

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by endpoint modules.

    Having a protocol here makes it easy to pass test doubles/mocks while
    keeping the production implementation (`HttpTransport`) concrete.
    """

    async def post_json(self, endpoint: str, payload: Mapping[str, Any], *, timeout: float) -> int:
        ...


class HttpTransport:
    """POSTs JSON bodies to the collector and maps failures to :class:`DeliveryError`."""

    def __init__(self, config: GeotraserConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def post_json(self, endpoint: str, payload: Mapping[str, Any], *, timeout: float) -> int:
        """Send *payload* and return the (2xx) status code.

        Raises
        ------
        DeliveryError
            On network failure, timeout, or a non-2xx status.
        """
        headers: dict[str, str] = {
            "content-type": "application/json",
            "user-agent": self._config.user_agent,
        }
        url = f"{self._config.base_url.rstrip('/')}{endpoint}"
        body = json.dumps(dict(payload), separators=(",", ":"))

        _logger.debug("POST %s body=%s", url, redact_for_log(payload))

        try:
            async with self._http.post(
                url,
                data=body,
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=timeout),
            ) as resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise DeliveryError(
                        f"HTTP {resp.status} from {endpoint}: {text[:200]}",
                        status_code=resp.status,
                        endpoint=endpoint,
                    )
                _logger.debug("POST %s -> %d", endpoint, resp.status)
                return resp.status
        except DeliveryError:
            raise
        except TimeoutError as exc:
            raise DeliveryError(
                f"Request to {endpoint} timed out after {timeout}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise DeliveryError(
                f"Request to {endpoint} failed: {exc}",
                endpoint=endpoint,
            ) from exc
