"""Small helpers for parsing field set event payloads."""

import json
from typing import Any, Optional

import aiohttp

MATCH_ASSIGNED = "fieldMatchAssigned"
MATCH_STARTED = "matchStarted"

# "Unknown" means nothing is queued, "P0" is the practice match with no teams,
# and skills runs have no alliances.
IGNORED_MATCH_NAMES = frozenset({"Unknown", "P0", "D Skills", "P Skills"})


def decode_message(message: aiohttp.WSMessage) -> Optional[dict]:
    """Return the JSON object carried by a text frame, or None."""
    if message.type != aiohttp.WSMsgType.TEXT:
        return None
    return decode_event(message.data)


def decode_event(text: str) -> Optional[dict]:
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload


def get_event_type(event: dict) -> Optional[str]:
    return event.get("type")


def is_ignored_match(name: Any) -> bool:
    return name is None or name in IGNORED_MATCH_NAMES
