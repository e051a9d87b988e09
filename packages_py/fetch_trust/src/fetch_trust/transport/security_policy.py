"""
Transport-security policy wrappers for httpx.
"""
import logging

import httpx

logger = logging.getLogger("fetch_trust.transport.security_policy")

# Status reported for requests blocked by the policy
ATS_VIOLATION_STATUS = -1022


def _violates(request: httpx.Request, require_secure_transport: bool) -> bool:
    return require_secure_transport and request.url.scheme != "https"


def _violation_response(request: httpx.Request) -> httpx.Response:
    logger.warning(f"SecureTransportPolicy: blocked insecure request to {request.url.host!r}")
    return httpx.Response(ATS_VIOLATION_STATUS, request=request)


class SecureTransportPolicy(httpx.AsyncBaseTransport):
    """
    Blocks plain-HTTP requests when secure transport is required.

    Blocked requests never reach the wrapped transport; they are answered
    with ATS_VIOLATION_STATUS.

    Example:
        base = httpx.AsyncHTTPTransport()
        transport = SecureTransportPolicy(base, require_secure_transport=True)
        client = httpx.AsyncClient(transport=transport)
    """

    def __init__(
        self,
        inner: httpx.AsyncBaseTransport,
        *,
        require_secure_transport: bool = False,
        close_inner: bool = True,
    ) -> None:
        self._inner = inner
        self._require_secure_transport = require_secure_transport
        self._close_inner = close_inner

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if _violates(request, self._require_secure_transport):
            return _violation_response(request)
        return await self._inner.handle_async_request(request)

    async def aclose(self) -> None:
        if self._close_inner:
            await self._inner.aclose()


class SyncSecureTransportPolicy(httpx.BaseTransport):
    """Synchronous counterpart of SecureTransportPolicy."""

    def __init__(
        self,
        inner: httpx.BaseTransport,
        *,
        require_secure_transport: bool = False,
        close_inner: bool = True,
    ) -> None:
        self._inner = inner
        self._require_secure_transport = require_secure_transport
        self._close_inner = close_inner

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        if _violates(request, self._require_secure_transport):
            return _violation_response(request)
        return self._inner.handle_request(request)

    def close(self) -> None:
        if self._close_inner:
            self._inner.close()
