"""Shared helpers for resource facades."""
from datetime import datetime
from typing import Any, Dict, Optional

from ports.adapter_error import ConfigurationError
from ports.http_client import LibraryIdClient

READ_HEADERS = {"accept": "application/json"}
WRITE_HEADERS = {"accept": "application/json", "content-type": "application/*+json"}


def resolve_library_id(client: LibraryIdClient, library_id: Optional[int]) -> int:
    """
    Pick the library id for a call: explicit value first, client default second.

    Raises:
        ConfigurationError: If neither is set.
    """
    effective = library_id if library_id is not None else client.default_library_id
    if effective is None:
        raise ConfigurationError("Library ID is required")
    return effective


def compact(**fields: Any) -> Dict[str, Any]:
    """Drop unset fields; datetimes become ISO-8601 strings."""
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
        if value is not None
    }
