"""
Fluent builder producing immutable client configurations.
"""
import logging
from typing import Any, Callable, Dict, Optional

import httpx

from .config import (
    DEFAULT_CONTENT_TYPE,
    DEFAULT_ENCODING,
    DEFAULT_TIMEOUT,
    ClientConfig,
    validate_config,
)
from .core.executor import AsyncHttpClient, SyncHttpClient
from .types import Handler

logger = logging.getLogger("fetch_trust.builder")


class ClientBuilder:
    """Accumulates settings; `build()` snapshots them.

    Example:
        client = ClientBuilder(lambda b: b.set_url("https://api.example.com/users")).build()
        result = await client.get()

    Settings may also be assigned as attributes (`builder.timeout = 10`).
    Later changes to the builder never affect clients already built.
    """

    def __init__(self, build: Optional[Callable[["ClientBuilder"], Any]] = None):
        self.url: Optional[str] = None
        self.content_type: str = DEFAULT_CONTENT_TYPE
        self.timeout: float = DEFAULT_TIMEOUT
        self.encoding: str = DEFAULT_ENCODING
        self.headers: Dict[str, str] = {}
        self.parameters: Dict[str, Any] = {}
        self.trust_all_tls: bool = False
        self.host_domain: Optional[str] = None
        self.require_secure_transport: bool = False
        self.debug_print: bool = False
        self._handler: Optional[Handler] = None
        self._username: Optional[str] = None
        self._password: Optional[str] = None
        self._certificate: Optional[bytes] = None
        self._certificate_password: Optional[str] = None
        if build is not None:
            build(self)

    def set(self, build: Callable[["ClientBuilder"], Any]) -> "ClientBuilder":
        build(self)
        return self

    def set_url(self, url: Optional[str]) -> "ClientBuilder":
        self.url = url
        return self

    def handler(self, handler: Handler) -> "ClientBuilder":
        """Completion callback, called once per send."""
        if self._handler is not None:
            logger.debug("ClientBuilder.handler: replacing previously set handler")
        self._handler = handler
        return self

    def basic_auth(self, username: str, password: str) -> "ClientBuilder":
        self._username = username
        self._password = password
        return self

    def certificate(self, certificate: Optional[bytes], password: Optional[str] = None) -> "ClientBuilder":
        """Pin a certificate (DER or PEM) or, with a password, a PKCS#12 identity.

        Passing None clears the certificate and returns to default trust.
        """
        self._certificate = certificate
        self._certificate_password = password
        return self

    def to_config(self) -> ClientConfig:
        config = ClientConfig(
            url=self.url,
            content_type=self.content_type,
            timeout=self.timeout,
            encoding=self.encoding,
            headers=self.headers,
            parameters=self.parameters,
            username=self._username,
            password=self._password,
            certificate=self._certificate,
            certificate_password=self._certificate_password,
            trust_all_tls=self.trust_all_tls,
            host_domain=self.host_domain,
            require_secure_transport=self.require_secure_transport,
            debug_print=self.debug_print,
            completion=self._handler,
        )
        validate_config(config)
        return config

    def build(self, transport: Optional[httpx.AsyncBaseTransport] = None) -> AsyncHttpClient:
        return AsyncHttpClient(self.to_config(), transport=transport)

    def build_sync(self, transport: Optional[httpx.BaseTransport] = None) -> SyncHttpClient:
        return SyncHttpClient(self.to_config(), transport=transport)
