"""Connection handling shared by HTTP-backed AI providers."""

import logging

import httpx

from fincore_ml.exceptions import AIProviderError

logger = logging.getLogger(__name__)


class HTTPProviderMixin:
    """Pooled ``httpx.AsyncClient`` plus uniform error translation."""

    _base_url: str
    _timeout: float
    _client: httpx.AsyncClient | None = None

    def _headers(self) -> dict[str, str]:
        return {"Content-Type": "application/json"}

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # Allow extra read time for model loading (cold start)
            timeout = httpx.Timeout(
                connect=5.0, read=self._timeout, write=10.0, pool=5.0
            )
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=timeout,
                headers=self._headers(),
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _translate_error(self, e: httpx.HTTPError) -> AIProviderError:
        if isinstance(e, httpx.TimeoutException):
            reason = f"request timed out after {self._timeout:.1f}s"
        elif isinstance(e, httpx.ConnectError):
            reason = f"could not connect to {self._base_url}"
        elif isinstance(e, httpx.ReadError):
            reason = "connection interrupted while reading response"
        elif isinstance(e, httpx.HTTPStatusError):
            status = e.response.status_code
            if status == 429:
                reason = "rate limited"
            else:
                reason = f"backend returned HTTP {status}"
        else:
            reason = f"{type(e).__name__}: {e}"
        logger.warning("AI request failed: %s", reason)
        return AIProviderError(reason)
