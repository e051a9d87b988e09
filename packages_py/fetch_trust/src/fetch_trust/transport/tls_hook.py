"""
TLS handshake hook.

Attached to each request through the httpcore `trace` extension. When a
connection finishes its TLS handshake the hook builds a protection space
from the negotiated certificate chain, runs the challenge state machine,
and aborts the connection unless the decision accepts it.

httpx copies the extension onto redirected requests, so the host judged is
always the one of the connection being opened, taken from the
`connect_tcp`/`start_tls` events.
"""
import logging
import ssl
from typing import Any, Dict, List, Optional

import httpx

from ..auth.client_credential import ClientCredential
from ..config import ClientConfig
from ..trust.challenge import handle_challenge
from ..trust.server_trust import ProtectionSpace, ServerTrust
from ..types import TrustDecision, TrustDisposition

logger = logging.getLogger("fetch_trust.transport.tls_hook")

CONNECT_TCP_STARTED = "connection.connect_tcp.started"
START_TLS_STARTED = "connection.start_tls.started"
START_TLS_COMPLETE = "connection.start_tls.complete"


class TlsChallengeRejected(httpx.ConnectError):
    """The challenge decision refused the server."""

    def __init__(self, host: str, decision: TrustDecision) -> None:
        self.host = host
        self.decision = decision
        super().__init__(f"TLS challenge for {host!r} answered with {decision.disposition.value}")


def _as_der(cert: Any) -> Optional[bytes]:
    if isinstance(cert, bytes):
        return cert
    # Low-level `_ssl.Certificate` objects export PEM by default
    public_bytes = getattr(cert, "public_bytes", None)
    if callable(public_bytes):
        return ssl.PEM_cert_to_DER_cert(public_bytes())
    return None


def presented_chain(ssl_object: Any) -> List[bytes]:
    """DER chain sent by the peer, leaf first.

    Accepts both `ssl.SSLObject` (async streams) and the low-level socket
    object exposed by sync streams, whose methods take positional
    arguments only.
    """
    if ssl_object is None:
        return []
    get_chain = getattr(ssl_object, "get_unverified_chain", None)
    if callable(get_chain):
        chain = [der for der in (_as_der(cert) for cert in (get_chain() or [])) if der]
        if chain:
            return chain
    leaf = ssl_object.getpeercert(True)
    return [leaf] if leaf else []


class TlsChallengeHook:
    """Per-send handshake hook.

    Use `trace` with a sync httpx client and `atrace` with an async one.
    """

    def __init__(
        self,
        config: ClientConfig,
        host: str,
        port: Optional[int] = None,
        client_credential: Optional[ClientCredential] = None,
        platform_verified: bool = True,
    ) -> None:
        self._config = config
        self._host = host
        self._port = port
        self._client_credential = client_credential
        self._platform_verified = platform_verified
        self.decisions: List[TrustDecision] = []

    @property
    def host(self) -> str:
        """Host of the connection currently being opened."""
        return self._host

    @property
    def port(self) -> Optional[int]:
        return self._port

    def trace(self, event_name: str, info: Dict[str, Any]) -> None:
        try:
            self._on_event(event_name, info)
        except httpx.ConnectError:
            stream = info.get("return_value")
            if stream is not None:
                stream.close()
            raise

    async def atrace(self, event_name: str, info: Dict[str, Any]) -> None:
        try:
            self._on_event(event_name, info)
        except httpx.ConnectError:
            stream = info.get("return_value")
            if stream is not None:
                await stream.aclose()
            raise

    def protection_space(self, ssl_object: Any) -> ProtectionSpace:
        chain = presented_chain(ssl_object)
        server_trust = ServerTrust(chain, self._host) if chain else None
        return ProtectionSpace(
            host=self._host,
            port=self._port,
            protocol="https",
            server_trust=server_trust,
        )

    def _on_event(self, event_name: str, info: Dict[str, Any]) -> None:
        if event_name == CONNECT_TCP_STARTED:
            self._host = info.get("host") or self._host
            self._port = info.get("port", self._port)
            return
        if event_name == START_TLS_STARTED:
            self._host = info.get("server_hostname") or self._host
            return
        if event_name != START_TLS_COMPLETE:
            return

        try:
            stream = info.get("return_value")
            ssl_object = stream.get_extra_info("ssl_object") if stream is not None else None
            space = self.protection_space(ssl_object)
            decision = handle_challenge(space, self._config, self._client_credential)
        except Exception as e:
            logger.error(f"TlsChallengeHook: challenge for host={self._host!r} failed: {type(e).__name__}: {e}")
            raise httpx.ConnectError(f"TLS challenge for {self._host!r} could not be evaluated: {e}") from e

        self.decisions.append(decision)
        self.apply(decision)

    def apply(self, decision: TrustDecision) -> None:
        """Let the connection continue or abort it."""
        disposition = decision.disposition
        if disposition is TrustDisposition.USE_CREDENTIAL:
            logger.debug(
                f"TlsChallengeHook.apply: host={self._host!r} accepted, "
                f"credential={type(decision.credential).__name__}"
            )
            return

        if disposition is TrustDisposition.PERFORM_DEFAULT_HANDLING:
            if self._platform_verified:
                return
            # Handshake ran without platform verification, nothing vouches for the peer
            logger.warning(
                f"TlsChallengeHook.apply: default handling unavailable for unverified host={self._host!r}"
            )
            raise TlsChallengeRejected(self._host, decision)

        raise TlsChallengeRejected(self._host, decision)
