"""
Request construction and outcome classification for fetch_trust.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..auth.basic_auth import basic_auth_header
from ..config import ClientConfig
from ..errors import (
    HttpStatusError,
    InvalidURLError,
    MissingURLError,
    SecurityTransportError,
    TransportError,
)
from ..transport.security_policy import ATS_VIOLATION_STATUS
from ..types import Failure, Method, Result, Success
from .body_encoder import encode_body

logger = logging.getLogger("fetch_trust.request_builder")


@dataclass(frozen=True)
class PreparedRequest:
    method: Method
    url: httpx.URL
    headers: httpx.Headers
    body: Optional[bytes] = None


def parse_url(url: Optional[str]) -> Result[httpx.URL]:
    """Accept absolute http(s) URLs with a host."""
    if not url:
        return Failure(MissingURLError())

    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError) as e:
        return Failure(InvalidURLError(url, f"Invalid URL: {e}."))

    if parsed.scheme not in ("http", "https") or not parsed.host:
        return Failure(InvalidURLError(url))
    return Success(parsed)


def build_headers(method: Method, config: ClientConfig, body: Optional[bytes]) -> httpx.Headers:
    """Authorization first, then user headers, then body headers.

    A missing or unencodable basic-auth credential is logged and the request
    goes out without Authorization.
    """
    headers = httpx.Headers()

    auth = basic_auth_header(config.username, config.password, config.encoding)
    if auth.is_success:
        headers["Authorization"] = auth.value
    else:
        logger.info(f"build_headers: sending without Authorization: {auth.error}")

    for key, value in config.headers.items():
        headers[key] = value

    if method.has_body and body is not None:
        headers["Content-Length"] = str(len(body))
        if "content-type" not in headers:
            headers["Content-Type"] = config.content_type

    return headers


def prepare_request(method: Method, config: ClientConfig) -> Result[PreparedRequest]:
    """Validate the URL and build headers and body. No I/O happens here."""
    url_result = parse_url(config.url)
    if not url_result.is_success:
        return url_result

    body: Optional[bytes] = None
    if method.has_body:
        encoded = encode_body(config.parameters, config.content_type, config.encoding, method)
        if not encoded.is_success:
            return encoded
        body = encoded.value

    return Success(
        PreparedRequest(
            method=method,
            url=url_result.value,
            headers=build_headers(method, config, body),
            body=body,
        )
    )


def classify_outcome(
    response: Optional[httpx.Response],
    error: Optional[BaseException] = None,
) -> Result[bytes]:
    """Map a transport outcome to exactly one result.

    Precedence: transport error, security policy, status, body.
    """
    if error is not None:
        return Failure(TransportError(error))
    if response is None:
        return Failure(TransportError(RuntimeError("No response received")))
    if response.status_code == ATS_VIOLATION_STATUS:
        return Failure(SecurityTransportError())
    if response.status_code != 200:
        return Failure(HttpStatusError(response.status_code, response.content))
    return Success(response.content)
