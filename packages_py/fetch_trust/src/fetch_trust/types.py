"""
Type definitions for fetch_trust.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar, Union


T = TypeVar("T")
U = TypeVar("U")


class Method(str, Enum):
    """HTTP verbs supported by the client.

    UPDATE is sent on the wire as PUT.
    """

    GET = "GET"
    DELETE = "DELETE"
    POST = "POST"
    UPDATE = "UPDATE"

    @property
    def wire_method(self) -> str:
        return "PUT" if self is Method.UPDATE else self.value

    @property
    def has_body(self) -> bool:
        return self in (Method.POST, Method.UPDATE)


class CertificateMode(str, Enum):
    """How a configured certificate is used during the TLS handshake."""

    NONE = "none"
    PUBLIC_KEY = "public_key"


class TrustDisposition(str, Enum):
    """Outcome of a TLS authentication challenge."""

    USE_CREDENTIAL = "use_credential"
    REJECT_PROTECTION_SPACE = "reject_protection_space"
    PERFORM_DEFAULT_HANDLING = "perform_default_handling"
    CANCEL_AUTHENTICATION_CHALLENGE = "cancel_authentication_challenge"


@dataclass(frozen=True)
class TrustDecision:
    """Disposition plus the credential handed back to the transport."""

    disposition: TrustDisposition
    credential: Optional[Any] = None

    @classmethod
    def use_credential(cls, credential: Any) -> "TrustDecision":
        return cls(TrustDisposition.USE_CREDENTIAL, credential)

    @classmethod
    def reject_protection_space(cls) -> "TrustDecision":
        return cls(TrustDisposition.REJECT_PROTECTION_SPACE)

    @classmethod
    def perform_default_handling(cls) -> "TrustDecision":
        return cls(TrustDisposition.PERFORM_DEFAULT_HANDLING)

    @classmethod
    def cancel_authentication_challenge(cls) -> "TrustDecision":
        return cls(TrustDisposition.CANCEL_AUTHENTICATION_CHALLENGE)


@dataclass(frozen=True)
class Success(Generic[T]):
    """Successful result carrying a value."""

    value: T

    @property
    def is_success(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> "Success[U]":
        return Success(fn(self.value))


@dataclass(frozen=True)
class Failure:
    """Failed result carrying an HttpClientError."""

    error: Exception

    @property
    def is_success(self) -> bool:
        return False

    def unwrap(self) -> Any:
        raise self.error

    def map(self, fn: Callable[[Any], Any]) -> "Failure":
        return self


Result = Union[Success[T], Failure]

# Completion callback invoked once per send
Handler = Callable[[Result[bytes]], None]
