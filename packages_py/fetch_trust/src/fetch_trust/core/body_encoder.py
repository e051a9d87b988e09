"""
Request body encoding for write verbs.
"""
import json
import logging
from typing import Any, Mapping

from ..config import DEFAULT_ENCODING, FORM_URLENCODED
from ..errors import EmptyParametersError, EncodingError, SerializationError
from ..types import Failure, Method, Result, Success

logger = logging.getLogger("fetch_trust.body_encoder")


def stringify(value: Any) -> str:
    """Default scalar-to-string conversion used by form bodies."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "nil"
    return str(value)


def form_string(parameters: Mapping[str, Any]) -> str:
    """Join parameters as key=value pairs with '&'.

    Keys and values are not percent-escaped.
    """
    return "&".join(f"{key}={stringify(value)}" for key, value in parameters.items())


def encode_body(
    parameters: Mapping[str, Any],
    content_type: str,
    encoding: str = DEFAULT_ENCODING,
    method: Method = Method.POST,
) -> Result[bytes]:
    """Encode parameters into a request body for the given content type."""
    if not parameters:
        return Failure(EmptyParametersError(method.value))

    if content_type == FORM_URLENCODED:
        form = form_string(parameters)
        try:
            return Success(form.encode(encoding))
        except UnicodeEncodeError as e:
            logger.debug(f"encode_body: form body not representable in {encoding}: {e}")
            return Failure(EncodingError(f"Form body cannot be encoded as {encoding}."))

    try:
        data = json.dumps(dict(parameters), allow_nan=False)
    except (TypeError, ValueError) as e:
        logger.debug(f"encode_body: JSON serialization failed: {e}")
        return Failure(SerializationError(f"Parameters are not JSON serializable: {e}"))
    return Success(data.encode("utf-8"))
