import json
import logging
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


def encode(event: BaseModel) -> str:
    """Serialize an outbound event to a JSON text frame."""
    return event.model_dump_json(by_alias=True)


def decode(raw: Union[str, bytes]) -> Optional[Dict[str, Any]]:
    """
    Parse an inbound frame.

    Returns None when the frame is not valid UTF-8 JSON or is not a JSON object.
    """
    try:
        if isinstance(raw, (bytes, bytearray)):
            raw = raw.decode("utf-8")
        data = json.loads(raw)
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        logger.debug(f"Could not decode frame: {e}")
        return None
    if not isinstance(data, dict):
        return None
    return data
