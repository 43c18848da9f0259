"""Response envelope handling"""

from typing import Any


def unwrap_envelope(payload: Any) -> Any:
    """
    Return the payload inside a `{success, data}` envelope.
    Payloads without a `data` key are returned unchanged.
    """
    if isinstance(payload, dict) and payload.get("data") is not None:
        return payload["data"]
    return payload
