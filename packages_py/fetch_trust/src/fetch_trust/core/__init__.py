"""
Core modules for fetch_trust.
"""
from .body_encoder import encode_body, form_string
from .request_builder import PreparedRequest, classify_outcome, parse_url, prepare_request
from .executor import AsyncHttpClient, SyncHttpClient, send, send_sync

__all__ = [
    "encode_body",
    "form_string",
    "PreparedRequest",
    "classify_outcome",
    "parse_url",
    "prepare_request",
    "AsyncHttpClient",
    "SyncHttpClient",
    "send",
    "send_sync",
]
