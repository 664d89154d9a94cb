"""Upload authorization signatures."""
import hashlib

from domain.models import SignatureParams


def create_signature(access_key: str, params: SignatureParams) -> str:
    """
    Build the signature Bunny Stream expects on TUS upload requests.

    SHA-256 over ``library_id + access_key + expire_at_ms + video_id``, as 64
    lowercase hex characters. The server recomputes the same digest, so the
    expiry used here must be the one sent in ``AuthorizationExpire``.

    Args:
        access_key: Library API key.
        params: Library id, video id and expiry.

    Returns:
        Hex digest.
    """
    payload = f"{params.library_id}{access_key}{params.expire_at_ms}{params.video_id}"
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()
