"""
Server trust evaluation and TLS challenge handling.
"""
from .server_trust import ProtectionSpace, ServerTrust, TrustExceptions, TrustResult
from .evaluator import should_trust_protection_space
from .challenge import handle_challenge

__all__ = [
    "ProtectionSpace",
    "ServerTrust",
    "TrustExceptions",
    "TrustResult",
    "should_trust_protection_space",
    "handle_challenge",
]
