"""
Request executor for fetch_trust.

`send` and `send_sync` are free functions of (Method, ClientConfig); the
client classes only bind a configuration and an optional transport.
"""
import logging
from typing import Optional

import httpx

from ..auth.client_credential import ClientCredential, load_client_credential
from ..config import ClientConfig
from ..console import print_request, print_response
from ..transport.security_policy import SecureTransportPolicy, SyncSecureTransportPolicy
from ..transport.ssl_context import build_ssl_context, uses_platform_verification
from ..transport.tls_hook import TlsChallengeHook
from ..types import Handler, Method, Result
from .request_builder import PreparedRequest, classify_outcome, prepare_request

logger = logging.getLogger("fetch_trust.executor")


class Completion:
    """Delivers a send's result exactly once."""

    def __init__(self, handler: Optional[Handler] = None) -> None:
        self._handler = handler
        self._result: Optional[Result[bytes]] = None
        self._done = False

    @property
    def done(self) -> bool:
        return self._done

    @property
    def result(self) -> Optional[Result[bytes]]:
        return self._result

    def resolve(self, result: Result[bytes]) -> Result[bytes]:
        if self._done:
            raise RuntimeError("Completion already resolved")
        self._done = True
        self._result = result
        if not result.is_success:
            logger.debug(f"Completion.resolve: {type(result.error).__name__}: {result.error}")
        if self._handler is not None:
            self._handler(result)
        return result


def _hook_for(
    config: ClientConfig,
    request: PreparedRequest,
    credential: Optional[ClientCredential],
) -> TlsChallengeHook:
    return TlsChallengeHook(
        config,
        host=request.url.host,
        port=request.url.port,
        client_credential=credential,
        platform_verified=uses_platform_verification(config),
    )


def _trace_request(config: ClientConfig, request: PreparedRequest) -> None:
    logger.debug(f"send: method={request.method.wire_method}, url={request.url}, config={config!r}")
    if config.debug_print:
        print_request(request.method.wire_method, str(request.url), request.headers, request.body)


def _trace_response(config: ClientConfig, request: PreparedRequest, response: httpx.Response) -> None:
    logger.debug(f"send: {request.url} -> {response.status_code}")
    if config.debug_print:
        print_response(str(request.url), response.status_code, response.reason_phrase, response.content)


async def send(
    method: Method,
    config: ClientConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Result[bytes]:
    """Issue one request and resolve its result exactly once.

    The result is returned and, when configured, passed to
    `config.completion`. Failures before I/O (URL, body) never touch the
    transport.
    """
    completion = Completion(config.completion)

    prepared = prepare_request(method, config)
    if not prepared.is_success:
        logger.error(f"send: request not sent: {prepared.error}")
        return completion.resolve(prepared)
    request = prepared.value

    credential = load_client_credential(config.certificate, config.certificate_password)
    hook = _hook_for(config, request, credential)
    close_inner = transport is None
    if transport is None:
        transport = httpx.AsyncHTTPTransport(verify=build_ssl_context(config, credential), trust_env=False)
    policy = SecureTransportPolicy(
        transport,
        require_secure_transport=config.require_secure_transport,
        close_inner=close_inner,
    )

    _trace_request(config, request)
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None
    try:
        async with httpx.AsyncClient(
            transport=policy,
            timeout=httpx.Timeout(config.timeout),
            follow_redirects=True,
            trust_env=False,
        ) as client:
            response = await client.request(
                request.method.wire_method,
                request.url,
                headers=request.headers,
                content=request.body,
                extensions={"trace": hook.atrace},
            )
    except httpx.RequestError as e:
        logger.error(f"Http error: {e}")
        error = e
    else:
        _trace_response(config, request, response)

    return completion.resolve(classify_outcome(response, error))


def send_sync(
    method: Method,
    config: ClientConfig,
    transport: Optional[httpx.BaseTransport] = None,
) -> Result[bytes]:
    """Blocking counterpart of `send`."""
    completion = Completion(config.completion)

    prepared = prepare_request(method, config)
    if not prepared.is_success:
        logger.error(f"send_sync: request not sent: {prepared.error}")
        return completion.resolve(prepared)
    request = prepared.value

    credential = load_client_credential(config.certificate, config.certificate_password)
    hook = _hook_for(config, request, credential)
    close_inner = transport is None
    if transport is None:
        transport = httpx.HTTPTransport(verify=build_ssl_context(config, credential), trust_env=False)
    policy = SyncSecureTransportPolicy(
        transport,
        require_secure_transport=config.require_secure_transport,
        close_inner=close_inner,
    )

    _trace_request(config, request)
    response: Optional[httpx.Response] = None
    error: Optional[BaseException] = None
    try:
        with httpx.Client(
            transport=policy,
            timeout=httpx.Timeout(config.timeout),
            follow_redirects=True,
            trust_env=False,
        ) as client:
            response = client.request(
                request.method.wire_method,
                request.url,
                headers=request.headers,
                content=request.body,
                extensions={"trace": hook.trace},
            )
    except httpx.RequestError as e:
        logger.error(f"Http error: {e}")
        error = e
    else:
        _trace_response(config, request, response)

    return completion.resolve(classify_outcome(response, error))


class AsyncHttpClient:
    """Asynchronous client bound to one immutable configuration."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def send(self, method: Method) -> Result[bytes]:
        return await send(method, self._config, transport=self._transport)

    async def get(self) -> Result[bytes]:
        """GET request."""
        return await self.send(Method.GET)

    async def delete(self) -> Result[bytes]:
        """DELETE request."""
        return await self.send(Method.DELETE)

    async def post(self) -> Result[bytes]:
        """POST request with the encoded parameters."""
        return await self.send(Method.POST)

    async def update(self) -> Result[bytes]:
        """PUT request with the encoded parameters."""
        return await self.send(Method.UPDATE)


class SyncHttpClient:
    """Synchronous client bound to one immutable configuration."""

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self._config = config
        self._transport = transport

    @property
    def config(self) -> ClientConfig:
        return self._config

    def send(self, method: Method) -> Result[bytes]:
        return send_sync(method, self._config, transport=self._transport)

    def get(self) -> Result[bytes]:
        """GET request."""
        return self.send(Method.GET)

    def delete(self) -> Result[bytes]:
        """DELETE request."""
        return self.send(Method.DELETE)

    def post(self) -> Result[bytes]:
        """POST request with the encoded parameters."""
        return self.send(Method.POST)

    def update(self) -> Result[bytes]:
        """PUT request with the encoded parameters."""
        return self.send(Method.UPDATE)
