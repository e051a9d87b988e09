"""
Credentials handed to the transport when a TLS challenge is accepted.
"""
import logging
import os
import secrets
import ssl
import tempfile
from dataclasses import dataclass, field
from typing import Any, List, Optional

from cryptography import x509
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    PrivateFormat,
    pkcs12,
)

from ..errors import CertificateParseError

logger = logging.getLogger("fetch_trust.auth.client_credential")


@dataclass(frozen=True)
class ServerTrustCredential:
    """Accepts the server as presented; wraps the evaluated trust."""

    trust: Any


@dataclass(frozen=True)
class ClientCredential:
    """Signing identity extracted from a PKCS#12 container."""

    private_key: Any
    certificate: x509.Certificate
    additional_certificates: List[x509.Certificate] = field(default_factory=list)

    def install(self, context: ssl.SSLContext) -> None:
        """Load the identity into an SSL context for mutual TLS.

        `ssl` only reads key material from files, so the identity is written
        to a private temporary directory with the key encrypted under a
        one-off passphrase, then removed.
        """
        passphrase = secrets.token_urlsafe(32).encode("ascii")
        chain = [self.certificate, *self.additional_certificates]
        with tempfile.TemporaryDirectory(prefix="fetch_trust_") as tmp:
            cert_path = os.path.join(tmp, "identity.pem")
            key_path = os.path.join(tmp, "identity.key")
            with open(cert_path, "wb") as f:
                for cert in chain:
                    f.write(cert.public_bytes(Encoding.PEM))
            with open(key_path, "wb") as f:
                f.write(
                    self.private_key.private_bytes(
                        Encoding.PEM,
                        PrivateFormat.PKCS8,
                        BestAvailableEncryption(passphrase),
                    )
                )
            context.load_cert_chain(cert_path, key_path, password=passphrase)
        logger.debug(f"ClientCredential.install: subject={self.certificate.subject.rfc4514_string()}")


def _log_parse_error(error: CertificateParseError) -> None:
    logger.error(f"Http error: Invalid certificate or password. ({error})")


def load_client_credential(
    certificate: Optional[bytes],
    password: Optional[str],
) -> Optional[ClientCredential]:
    """Open a PKCS#12 container; None when it cannot be used."""
    if certificate is None:
        return None
    if password is None:
        # Passwordless identities are not supported
        return None

    try:
        private_key, leaf, additional = pkcs12.load_key_and_certificates(
            certificate, password.encode("utf-8")
        )
    except (ValueError, TypeError) as e:
        _log_parse_error(CertificateParseError(str(e)))
        return None

    if private_key is None or leaf is None:
        _log_parse_error(CertificateParseError("PKCS#12 container holds no identity."))
        return None

    return ClientCredential(
        private_key=private_key,
        certificate=leaf,
        additional_certificates=list(additional or []),
    )
