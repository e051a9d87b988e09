"""
Error taxonomy for fetch_trust.

Errors are delivered as `Failure` values through the completion result;
`send` never raises them.
"""
from typing import Optional


class HttpClientError(Exception):
    """Base class for every failure the client reports."""


class MissingURLError(HttpClientError):
    def __init__(self, message: str = "URL cannot be None.") -> None:
        super().__init__(message)


class InvalidURLError(HttpClientError):
    def __init__(self, url: str, reason: str = "Invalid URL.") -> None:
        self.url = url
        super().__init__(f"{reason} ({url!r})")


class MissingCredentialError(HttpClientError):
    """Basic auth credentials were not configured. Logged, never fatal."""


class EmptyParametersError(HttpClientError):
    def __init__(self, method: str) -> None:
        self.method = method
        super().__init__(f"HttpClient cannot request ({method}) without parameters.")


class SerializationError(HttpClientError):
    """Parameters could not be serialized for the configured content type."""


class EncodingError(HttpClientError):
    """Text could not be encoded with the configured encoding."""


class TransportError(HttpClientError):
    """Network-level failure; wraps the underlying exception."""

    def __init__(self, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"Http error: {cause}")


class SecurityTransportError(HttpClientError):
    """Transport-security policy rejected the request."""

    def __init__(self, message: str = "App transport security policy violation.") -> None:
        super().__init__(message)


class HttpStatusError(HttpClientError):
    """Server answered with a status other than 200."""

    def __init__(self, status: int, body: Optional[bytes] = None) -> None:
        self.status = status
        self.body = body
        super().__init__(f"HTTP {status}")


class CertificateParseError(HttpClientError):
    """PKCS#12 container could not be opened. Logged, never surfaced."""
