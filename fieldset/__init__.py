"""Live field set events from the TM websocket."""

from fieldset.fieldset import FieldsetStream, StreamState

__all__ = ["FieldsetStream", "StreamState"]
