"""
HTTP client with basic authentication, certificate pinning and client
certificates.

Build a client with ClientBuilder, send with get/post/delete/update, and
receive one Result per send (returned, and passed to the completion
handler when one is set).
"""
from .types import (
    CertificateMode,
    Failure,
    Handler,
    Method,
    Result,
    Success,
    TrustDecision,
    TrustDisposition,
)
from .errors import (
    CertificateParseError,
    EmptyParametersError,
    EncodingError,
    HttpClientError,
    HttpStatusError,
    InvalidURLError,
    MissingCredentialError,
    MissingURLError,
    SecurityTransportError,
    SerializationError,
    TransportError,
)
from .config import ClientConfig, validate_config
from .builder import ClientBuilder
from .core.body_encoder import encode_body
from .core.executor import AsyncHttpClient, SyncHttpClient, send, send_sync
from .auth.basic_auth import basic_auth_header
from .auth.client_credential import ClientCredential, ServerTrustCredential, load_client_credential
from .trust.server_trust import ProtectionSpace, ServerTrust, TrustResult
from .trust.evaluator import should_trust_protection_space
from .trust.challenge import handle_challenge
from .transport.security_policy import ATS_VIOLATION_STATUS

__all__ = [
    # Types
    "CertificateMode",
    "Failure",
    "Handler",
    "Method",
    "Result",
    "Success",
    "TrustDecision",
    "TrustDisposition",
    # Errors
    "CertificateParseError",
    "EmptyParametersError",
    "EncodingError",
    "HttpClientError",
    "HttpStatusError",
    "InvalidURLError",
    "MissingCredentialError",
    "MissingURLError",
    "SecurityTransportError",
    "SerializationError",
    "TransportError",
    # Config
    "ClientConfig",
    "ClientBuilder",
    "validate_config",
    # Clients
    "AsyncHttpClient",
    "SyncHttpClient",
    "send",
    "send_sync",
    # Encoding and auth
    "encode_body",
    "basic_auth_header",
    "ClientCredential",
    "ServerTrustCredential",
    "load_client_credential",
    # Trust
    "ProtectionSpace",
    "ServerTrust",
    "TrustResult",
    "should_trust_protection_space",
    "handle_challenge",
    "ATS_VIOLATION_STATUS",
]

__version__ = "0.1.0"
