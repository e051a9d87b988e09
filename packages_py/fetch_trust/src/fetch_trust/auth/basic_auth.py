"""
Basic authorization header construction.
"""
import base64
import logging
from typing import Optional

from ..config import DEFAULT_ENCODING
from ..console import mask_auth_header
from ..errors import EncodingError, MissingCredentialError
from ..types import Failure, Result, Success

logger = logging.getLogger("fetch_trust.auth.basic_auth")


def basic_auth_header(
    username: Optional[str],
    password: Optional[str],
    encoding: str = DEFAULT_ENCODING,
) -> Result[str]:
    """Return `Basic base64(username:password)` or a failure.

    Both values must be non-empty.
    """
    if not username:
        return Failure(MissingCredentialError("Username not informed for Basic Authorization"))
    if not password:
        return Failure(MissingCredentialError("Password not informed for Basic Authorization"))

    try:
        data = f"{username}:{password}".encode(encoding)
    except UnicodeEncodeError:
        return Failure(EncodingError("Error formatting the basic authentication provided."))

    header = f"Basic {base64.b64encode(data).decode('ascii')}"
    logger.debug(f"basic_auth_header: username={username!r} -> Authorization={mask_auth_header(header)}")
    return Success(header)
