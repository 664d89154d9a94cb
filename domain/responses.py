"""Normalize transport outcomes into response envelopes."""
import logging
from typing import Any

from domain.models import (
    Failure,
    LocalErrorPayload,
    MessageErrorPayload,
    ResponseEnvelope,
    Success,
    ValidationErrorPayload,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Request failed"
TRANSPORT_ERROR_MESSAGE = "Request could not be completed"
TRANSPORT_ERROR_STATUS = 500


def normalize_response(status_code: int, body: Any) -> ResponseEnvelope:
    """
    Wrap an HTTP response into a Success or Failure envelope.

    Args:
        status_code: HTTP status code.
        body: Parsed JSON body, raw text, or None.

    Returns:
        Success for status < 400, Failure otherwise.
    """
    if status_code < 400:
        return Success(status_code=status_code, data=body)

    return Failure(status_code=status_code, data=_error_payload(body))


def normalize_transport_error() -> Failure:
    """Failure envelope for requests that never got an HTTP response."""
    return Failure(
        status_code=TRANSPORT_ERROR_STATUS,
        data=LocalErrorPayload(error=TRANSPORT_ERROR_MESSAGE),
    )


def _error_payload(body: Any):
    if not isinstance(body, dict):
        return MessageErrorPayload(error=GENERIC_ERROR_MESSAGE, body=body)

    title = body.get("title")
    if title:
        errors = body.get("errors")
        return ValidationErrorPayload(
            error=str(title),
            type=body.get("type"),
            status=body.get("status"),
            trace_id=body.get("traceId"),
            errors=errors if isinstance(errors, dict) else {},
        )

    message = body.get("Message")
    if message:
        return MessageErrorPayload(error=str(message), body=body)

    logger.debug(f"Unrecognized error body: {body}")
    return MessageErrorPayload(error=GENERIC_ERROR_MESSAGE, body=body)
