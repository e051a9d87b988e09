"""
Server trust object presented with a TLS challenge.

Evaluation mirrors the platform trust API: install anchors, evaluate, and on
a recoverable failure optionally record exceptions and evaluate again.

Failures considered:
- anchor: the presented chain does not lead to one of the anchors
- hostname: the leaf certificate does not name the host
- validity: the leaf certificate is expired or not yet valid

Only hostname and validity failures can be excepted.
"""
import hashlib
import ipaddress
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, FrozenSet, List, Optional, Sequence

from cryptography import x509
from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.serialization import Encoding
from cryptography.x509.oid import NameOID

logger = logging.getLogger("fetch_trust.trust.server_trust")

ANCHOR = "anchor"
HOSTNAME = "hostname"
VALIDITY = "validity"

EXCEPTABLE_FAILURES = frozenset({HOSTNAME, VALIDITY})


class TrustResult(str, Enum):
    INVALID = "invalid"
    PROCEED = "proceed"
    DENY = "deny"
    UNSPECIFIED = "unspecified"
    RECOVERABLE_TRUST_FAILURE = "recoverable_trust_failure"
    FATAL_TRUST_FAILURE = "fatal_trust_failure"


@dataclass(frozen=True)
class TrustExceptions:
    """Failures accepted for one specific leaf certificate."""

    leaf_fingerprint: str
    failures: FrozenSet[str]


def load_certificate(data: bytes) -> x509.Certificate:
    """Parse a DER or PEM certificate. Raises ValueError when neither."""
    if data.lstrip().startswith(b"-----BEGIN"):
        return x509.load_pem_x509_certificate(data)
    return x509.load_der_x509_certificate(data)


def fingerprint(cert: x509.Certificate) -> str:
    return hashlib.sha256(cert.public_bytes(Encoding.DER)).hexdigest()


def _issued_by(cert: x509.Certificate, issuer: x509.Certificate) -> bool:
    try:
        cert.verify_directly_issued_by(issuer)
    except (ValueError, TypeError, InvalidSignature):
        return False
    return True


def _dns_match(pattern: str, host: str) -> bool:
    pattern = pattern.lower().rstrip(".")
    host = host.lower().rstrip(".")
    if pattern.startswith("*."):
        # Wildcard covers exactly one leftmost label
        head, _, rest = host.partition(".")
        return bool(head) and rest == pattern[2:]
    return pattern == host


def matches_host(cert: x509.Certificate, host: str) -> bool:
    try:
        address = ipaddress.ip_address(host)
    except ValueError:
        address = None

    try:
        san = cert.extensions.get_extension_for_class(x509.SubjectAlternativeName).value
    except x509.ExtensionNotFound:
        san = None

    if san is not None:
        if address is not None:
            return address in san.get_values_for_type(x509.IPAddress)
        return any(_dns_match(name, host) for name in san.get_values_for_type(x509.DNSName))

    common_names = cert.subject.get_attributes_for_oid(NameOID.COMMON_NAME)
    return any(_dns_match(str(attr.value), host) for attr in common_names)


@dataclass
class ProtectionSpace:
    """Server context presented with a TLS challenge."""

    host: str
    port: Optional[int] = None
    protocol: str = "https"
    server_trust: Optional["ServerTrust"] = None


class ServerTrust:
    """Certificate chain presented by the server for `host`."""

    def __init__(
        self,
        chain: Sequence[bytes],
        host: str,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.chain_der = [bytes(c) for c in chain]
        self.host = host
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._anchors: List[x509.Certificate] = []
        self._exceptions: Optional[TrustExceptions] = None
        self._last_failures: FrozenSet[str] = frozenset()
        self._leaf_fingerprint: Optional[str] = None

    @property
    def leaf_der(self) -> Optional[bytes]:
        return self.chain_der[0] if self.chain_der else None

    def set_anchor_certificates(self, anchors: Sequence[x509.Certificate]) -> None:
        """Replace the anchors; only these are trusted afterwards."""
        self._anchors = list(anchors)

    def set_exceptions(self, exceptions: Optional[TrustExceptions]) -> None:
        self._exceptions = exceptions

    def copy_exceptions(self) -> Optional[TrustExceptions]:
        """Exceptions that would accept the last evaluation's failures."""
        if self._leaf_fingerprint is None:
            return None
        return TrustExceptions(
            leaf_fingerprint=self._leaf_fingerprint,
            failures=self._last_failures & EXCEPTABLE_FAILURES,
        )

    def _reaches_anchor(self, chain: List[x509.Certificate]) -> bool:
        anchor_der = {a.public_bytes(Encoding.DER) for a in self._anchors}
        for index, cert in enumerate(chain):
            if cert.public_bytes(Encoding.DER) in anchor_der:
                return True
            if any(_issued_by(cert, anchor) for anchor in self._anchors):
                return True
            if index + 1 >= len(chain) or not _issued_by(cert, chain[index + 1]):
                return False
        return False

    def _is_within_validity(self, cert: x509.Certificate) -> bool:
        now = self._clock()
        return cert.not_valid_before_utc <= now <= cert.not_valid_after_utc

    def evaluate(self) -> TrustResult:
        if not self.chain_der:
            return TrustResult.INVALID

        try:
            chain = [x509.load_der_x509_certificate(der) for der in self.chain_der]
        except ValueError as e:
            logger.warning(f"ServerTrust.evaluate: unparsable chain for host={self.host!r}: {e}")
            return TrustResult.FATAL_TRUST_FAILURE

        leaf = chain[0]
        self._leaf_fingerprint = fingerprint(leaf)

        failures = set()
        if not self._reaches_anchor(chain):
            failures.add(ANCHOR)
        if not matches_host(leaf, self.host):
            failures.add(HOSTNAME)
        if not self._is_within_validity(leaf):
            failures.add(VALIDITY)
        self._last_failures = frozenset(failures)

        accepted: FrozenSet[str] = frozenset()
        if self._exceptions is not None and self._exceptions.leaf_fingerprint == self._leaf_fingerprint:
            accepted = self._exceptions.failures

        logger.debug(
            f"ServerTrust.evaluate: host={self.host!r}, failures={sorted(failures)}, "
            f"excepted={sorted(accepted)}"
        )

        if not failures:
            return TrustResult.UNSPECIFIED
        if self._last_failures <= accepted:
            return TrustResult.PROCEED
        return TrustResult.RECOVERABLE_TRUST_FAILURE
