"""
Authentication for fetch_trust.
"""
from .basic_auth import basic_auth_header
from .client_credential import ClientCredential, ServerTrustCredential, load_client_credential

__all__ = [
    "basic_auth_header",
    "ClientCredential",
    "ServerTrustCredential",
    "load_client_credential",
]
