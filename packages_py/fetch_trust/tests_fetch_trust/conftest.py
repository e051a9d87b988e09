"""
Shared fixtures for fetch_trust tests.
"""
import ipaddress
import ssl
import threading
from datetime import datetime, timedelta, timezone
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import List, Optional, Sequence

import pytest
from unittest.mock import MagicMock

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.serialization import (
    BestAvailableEncryption,
    Encoding,
    NoEncryption,
    PrivateFormat,
    pkcs12,
)
from cryptography.x509.oid import NameOID

HOST = "api.example.com"


def make_key():
    return ec.generate_private_key(ec.SECP256R1())


def make_cert(
    common_name: str,
    key,
    *,
    issuer_cert: Optional[x509.Certificate] = None,
    issuer_key=None,
    dns_names: Sequence[str] = (),
    ip_addresses: Sequence[str] = (),
    not_before: Optional[datetime] = None,
    not_after: Optional[datetime] = None,
    is_ca: bool = False,
) -> x509.Certificate:
    """Create a certificate; self-signed unless an issuer is given."""
    now = datetime.now(timezone.utc)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer = issuer_cert.subject if issuer_cert is not None else subject
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(not_before or now - timedelta(days=1))
        .not_valid_after(not_after or now + timedelta(days=30))
        .add_extension(x509.BasicConstraints(ca=is_ca, path_length=None), critical=True)
    )
    names: List[x509.GeneralName] = [x509.DNSName(n) for n in dns_names]
    names += [x509.IPAddress(ipaddress.ip_address(ip)) for ip in ip_addresses]
    if names:
        builder = builder.add_extension(x509.SubjectAlternativeName(names), critical=False)
    return builder.sign(issuer_key or key, hashes.SHA256())


def der(cert: x509.Certificate) -> bytes:
    return cert.public_bytes(Encoding.DER)


@pytest.fixture
def ca():
    """CA key and certificate."""
    key = make_key()
    return key, make_cert("Test Root CA", key, is_ca=True)


@pytest.fixture
def server_cert(ca):
    """Leaf for HOST issued by the CA."""
    ca_key, ca_cert = ca
    return make_cert(HOST, make_key(), issuer_cert=ca_cert, issuer_key=ca_key, dns_names=[HOST])


@pytest.fixture
def self_signed_cert():
    """Self-signed leaf for HOST."""
    return make_cert(HOST, make_key(), dns_names=[HOST])


@pytest.fixture
def unrelated_cert():
    """Self-signed certificate unrelated to any server chain."""
    return make_cert("unrelated.example.org", make_key(), dns_names=["unrelated.example.org"])


@pytest.fixture
def client_identity():
    """Client key and certificate."""
    key = make_key()
    return key, make_cert("client", key)


@pytest.fixture
def pkcs12_bytes(client_identity):
    """PKCS#12 container protected with 'secret'."""
    key, cert = client_identity
    return pkcs12.serialize_key_and_certificates(
        b"client", key, cert, None, BestAvailableEncryption(b"secret")
    )


@pytest.fixture
def ssl_object_factory():
    """Build a fake negotiated ssl object presenting the given chain."""

    def factory(chain: Sequence[bytes]):
        ssl_object = MagicMock()
        ssl_object.get_unverified_chain.return_value = list(chain)
        ssl_object.getpeercert.return_value = chain[0] if chain else None
        return ssl_object

    return factory


@pytest.fixture
def stream_factory(ssl_object_factory):
    """Build a fake network stream as returned by start_tls."""

    def factory(chain: Sequence[bytes]):
        stream = MagicMock()
        stream.get_extra_info.return_value = ssl_object_factory(chain)
        return stream

    return factory


class _LocalHandler(BaseHTTPRequestHandler):
    """Answers GET with 'ok', or redirects when the server has a target."""

    def do_GET(self):
        location = self.server.redirect_to
        if location:
            self.send_response(302)
            self.send_header("Location", location)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return
        body = b"ok"
        self.send_response(200)
        self.send_header("Content-Type", "text/plain")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture
def local_identity():
    """Self-signed key and certificate naming localhost and 127.0.0.1."""
    key = make_key()
    return key, make_cert("localhost", key, dns_names=["localhost"], ip_addresses=["127.0.0.1"])


@pytest.fixture
def tls_server(tmp_path, local_identity):
    """Start HTTPS servers on 127.0.0.1; returns the port of each one started."""
    key, cert = local_identity
    cert_path = tmp_path / "server.pem"
    key_path = tmp_path / "server.key"
    cert_path.write_bytes(cert.public_bytes(Encoding.PEM))
    key_path.write_bytes(key.private_bytes(Encoding.PEM, PrivateFormat.PKCS8, NoEncryption()))

    servers = []

    def start(redirect_to: Optional[str] = None) -> int:
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(str(cert_path), str(key_path))
        server = ThreadingHTTPServer(("127.0.0.1", 0), _LocalHandler)
        server.daemon_threads = True
        server.redirect_to = redirect_to
        server.socket = context.wrap_socket(server.socket, server_side=True)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return server.server_address[1]

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()
