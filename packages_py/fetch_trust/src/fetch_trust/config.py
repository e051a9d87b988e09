"""
Configuration for fetch_trust.
"""
import codecs
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional

from .console import mask_sensitive
from .types import CertificateMode, Handler

logger = logging.getLogger("fetch_trust.config")

# Default values
DEFAULT_CONTENT_TYPE = "application/json"
FORM_URLENCODED = "application/x-www-form-urlencoded"
DEFAULT_TIMEOUT = 60.0
DEFAULT_ENCODING = "utf-8"


@dataclass(frozen=True)
class ClientConfig:
    """Immutable request configuration produced by `ClientBuilder`.

    `headers` and `parameters` are frozen into read-only mappings so a config
    can be handed to concurrent sends without aliasing.
    """

    url: Optional[str] = None
    content_type: str = DEFAULT_CONTENT_TYPE
    timeout: float = DEFAULT_TIMEOUT
    encoding: str = DEFAULT_ENCODING
    headers: Mapping[str, str] = field(default_factory=dict)
    parameters: Mapping[str, Any] = field(default_factory=dict)
    username: Optional[str] = None
    password: Optional[str] = None
    certificate: Optional[bytes] = None
    certificate_password: Optional[str] = None
    trust_all_tls: bool = False
    host_domain: Optional[str] = None
    require_secure_transport: bool = False
    debug_print: bool = False
    completion: Optional[Handler] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "parameters", MappingProxyType(dict(self.parameters)))
        if self.certificate is not None:
            object.__setattr__(self, "certificate", bytes(self.certificate))

    @property
    def certificate_mode(self) -> CertificateMode:
        """PUBLIC_KEY exactly when certificate bytes are present."""
        if self.certificate is not None:
            return CertificateMode.PUBLIC_KEY
        return CertificateMode.NONE

    def __repr__(self) -> str:
        """Safe repr that masks sensitive values."""
        return (
            f"ClientConfig(url={self.url!r}, "
            f"content_type={self.content_type!r}, "
            f"timeout={self.timeout!r}, "
            f"encoding={self.encoding!r}, "
            f"headers={sorted(self.headers)!r}, "
            f"parameters={sorted(self.parameters)!r}, "
            f"username={self.username!r}, "
            f"password={mask_sensitive(self.password)!r}, "
            f"certificate_mode={self.certificate_mode.value!r}, "
            f"certificate_password={mask_sensitive(self.certificate_password)!r}, "
            f"trust_all_tls={self.trust_all_tls!r}, "
            f"host_domain={self.host_domain!r}, "
            f"has_completion={self.completion is not None})"
        )


def validate_config(config: ClientConfig) -> None:
    """Validate builder-supplied values.

    The URL is not checked here; a missing or malformed URL is reported
    through the send result instead.
    """
    if not config.content_type:
        raise ValueError("content_type is required")

    if isinstance(config.timeout, bool) or not isinstance(config.timeout, (int, float)):
        raise ValueError(f"timeout must be a number of seconds, got {config.timeout!r}")

    if config.timeout <= 0:
        raise ValueError(f"timeout must be positive, got {config.timeout!r}")

    try:
        codecs.lookup(config.encoding)
    except LookupError as e:
        raise ValueError(f"Unknown encoding: {config.encoding}") from e

    for key, value in config.headers.items():
        if not isinstance(key, str) or not isinstance(value, str):
            raise ValueError(f"Header {key!r} must map str to str")

    if config.certificate_password is not None and config.certificate is None:
        logger.warning("validate_config: certificate_password set without certificate, it will be ignored")
