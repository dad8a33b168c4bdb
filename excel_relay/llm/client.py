"""
Upstream client - one chat-completion call per relay request.

Talks to an OpenAI-compatible /chat/completions endpoint (Groq by default)
and turns every way that call can go wrong into a RelayError carrying the
status the caller should see.
"""
import time
import asyncio
import logging
from typing import Optional

import httpx

from ..errors import (
    UpstreamResponseError,
    UpstreamStatusError,
    UpstreamTimeoutError,
)
from ..payloads import UpstreamPayload
from ..stats import RelayStats

logger = logging.getLogger(__name__)


class UpstreamClient:
    """HTTP client for the chat-completion provider."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 30.0,
        stats: Optional[RelayStats] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._url = url
        self._api_key = api_key
        self._timeout = timeout
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)
        self.stats = stats or RelayStats()

        logger.info("Upstream client initialized: %s (timeout=%.1fs)", self._url, timeout)

    async def complete(self, payload: UpstreamPayload) -> str:
        """
        Send one chat-completion request and return the first choice's content.

        Args:
            payload: Model, messages and sampling parameters

        Returns:
            choices[0].message.content, untrimmed

        Raises:
            UpstreamTimeoutError: request failed in transit, or no answer within the timeout
            UpstreamStatusError: upstream returned a non-2xx status
            UpstreamResponseError: 2xx body is not JSON or has no usable choice
        """
        start_time = time.time()
        model = payload.model

        def elapsed_ms() -> int:
            return int((time.time() - start_time) * 1000)

        try:
            # httpx bounds each phase; wait_for bounds the call as a whole
            response = await asyncio.wait_for(
                self._client.post(
                    self._url,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                    json=payload.to_json(),
                ),
                timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            error_msg = f"Groq API timed out after {self._timeout:g}s"
            self.stats.record_failure(model, elapsed_ms(), error_msg)
            raise UpstreamTimeoutError(error_msg)
        except httpx.RequestError as e:
            # transport failures, undecodable bodies, redirect loops
            error_msg = f"Groq API failed: {str(e) or type(e).__name__}"
            self.stats.record_failure(model, elapsed_ms(), error_msg)
            raise UpstreamTimeoutError(error_msg) from e

        if not response.is_success:
            error = UpstreamStatusError(response.status_code, response.text)
            self.stats.record_failure(
                model, elapsed_ms(), error.message[:200], status_code=response.status_code
            )
            raise error

        try:
            data = response.json()
        except ValueError:
            logger.error("Upstream returned non-JSON body (first 500 chars): %s", response.text[:500])
            self.stats.record_failure(
                model, elapsed_ms(), "invalid JSON body", status_code=response.status_code
            )
            raise UpstreamResponseError("failed to parse upstream response")

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            self.stats.record_failure(
                model, elapsed_ms(), "no choices", status_code=response.status_code
            )
            raise UpstreamResponseError("no choices found")

        try:
            content = choices[0]["message"]["content"]
        except (KeyError, TypeError):
            content = None
        if not isinstance(content, str):
            self.stats.record_failure(
                model, elapsed_ms(), "choice without message content", status_code=response.status_code
            )
            raise UpstreamResponseError("failed to parse upstream response")

        latency_ms = elapsed_ms()
        self.stats.record_success(model, latency_ms, response.status_code)
        logger.debug("Upstream response: model=%s, latency=%dms, len=%d", model, latency_ms, len(content))

        return content

    async def aclose(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()
