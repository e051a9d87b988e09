"""
httpx transport pieces for fetch_trust.
"""
from .security_policy import ATS_VIOLATION_STATUS, SecureTransportPolicy, SyncSecureTransportPolicy
from .ssl_context import build_ssl_context, uses_platform_verification
from .tls_hook import TlsChallengeHook, TlsChallengeRejected

__all__ = [
    "ATS_VIOLATION_STATUS",
    "SecureTransportPolicy",
    "SyncSecureTransportPolicy",
    "build_ssl_context",
    "uses_platform_verification",
    "TlsChallengeHook",
    "TlsChallengeRejected",
]
