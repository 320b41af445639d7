from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import httpx


@dataclass(frozen=True)
class HttpResult:
    ok: bool
    status_code: int | None
    data: Any = None
    error_code: str | None = None
    retryable: bool = False


def _is_retryable(status_code: int) -> bool:
    return status_code in (408, 429) or status_code >= 500


class ServiceHttpClient:
    """
    GET-only JSON client for registry lookups on one pooled AsyncClient.
    Never retries; failures come back classified and callers decide what
    a failed lookup means.
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._client = httpx.AsyncClient(
            base_url=base_url, timeout=httpx.Timeout(timeout_seconds), transport=transport
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_json(self, url: str, *, params: Mapping[str, str] | None = None) -> HttpResult:
        try:
            resp = await self._client.get(url, params=dict(params or {}))
        except httpx.TimeoutException:
            return HttpResult(ok=False, status_code=None, error_code="TIMEOUT", retryable=True)
        except httpx.RequestError:
            # DNS errors, connection refused, TLS, etc.
            return HttpResult(ok=False, status_code=None, error_code="REQUEST_ERROR", retryable=True)

        if not 200 <= resp.status_code < 300:
            return HttpResult(
                ok=False,
                status_code=resp.status_code,
                error_code=f"HTTP_{resp.status_code}",
                retryable=_is_retryable(resp.status_code),
            )

        try:
            data = resp.json()
        except ValueError:
            return HttpResult(ok=False, status_code=resp.status_code, error_code="INVALID_JSON")
        return HttpResult(ok=True, status_code=resp.status_code, data=data)
