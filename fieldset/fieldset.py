"""WebSocket connection to a TM field set and dispatch of its events."""

import asyncio
import inspect
import logging
from contextlib import suppress
from enum import Enum
from typing import Any, Callable, Optional

import aiohttp

from fieldset.utils import (
    MATCH_ASSIGNED,
    MATCH_STARTED,
    decode_message,
    get_event_type,
    is_ignored_match,
)
from tmapi.tmapi import SessionManager, endpoint

logger = logging.getLogger("tmscraper.fieldset")


class StreamState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


async def _invoke(callback: Optional[Callable], *args) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class FieldsetStream:
    """Listens to one field set and hands queued/started matches to callbacks.

    Frames are handled one at a time in the order they arrive: the handler for
    a frame, including any page fetches needed to resolve a queued match,
    finishes before the next frame is read. The connection is not re-opened
    when it drops; call connect() again for that.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        fieldset_id: int,
        resolve_match: Callable[[str], Any],
        heartbeat: Optional[float] = None,
    ):
        self.session_manager = session_manager
        self.fieldset_id = fieldset_id
        self.resolve_match = resolve_match
        self.heartbeat = heartbeat
        self.state = StreamState.DISCONNECTED

        self._on_match_queued: Optional[Callable] = None
        self._on_match_started: Optional[Callable] = None
        self._http: Optional[aiohttp.ClientSession] = None
        self._ws: Optional[aiohttp.ClientWebSocketResponse] = None
        self._reader_task: Optional[asyncio.Task] = None

    @property
    def url(self) -> str:
        path = endpoint("fieldset", fieldset_id=self.fieldset_id)
        return f"ws://{self.session_manager.address}/{path}"

    ## ---------------------------- Subscriptions ---------------------------- ##
    async def on_match_queued(self, callback: Callable) -> None:
        self._on_match_queued = callback
        await self.connect()

    async def on_match_started(self, callback: Callable) -> None:
        self._on_match_started = callback
        await self.connect()

    ## ---------------------------- Connection ---------------------------- ##
    async def connect(self) -> None:
        if self.state != StreamState.DISCONNECTED:
            return

        self.state = StreamState.CONNECTING
        try:
            session = await asyncio.to_thread(self.session_manager.ensure_valid)
            self._http = aiohttp.ClientSession()
            self._ws = await self._http.ws_connect(
                self.url,
                headers={"Cookie": session.cookie_header},
                heartbeat=self.heartbeat,
            )
        except BaseException:
            await self._teardown()
            raise

        self.state = StreamState.CONNECTED
        logger.info("WebSocket connected to %s", self.url)
        self._reader_task = asyncio.create_task(self._read_frames())

    async def _read_frames(self) -> None:
        try:
            async for message in self._ws:
                event = decode_message(message)
                if event is not None:
                    await self.handle_event(event)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("WebSocket error on %s", self.url)
        finally:
            await self._teardown()
            logger.info("WebSocket disconnected from %s", self.url)

    async def _teardown(self) -> None:
        ws, http = self._ws, self._http
        self._ws = None
        self._http = None
        self.state = StreamState.DISCONNECTED
        if ws is not None:
            await ws.close()
        if http is not None:
            await http.close()

    async def close(self) -> None:
        task = self._reader_task
        self._reader_task = None
        if task is not None and not task.done():
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await self._teardown()

    async def wait_closed(self) -> None:
        """Block until the server closes the connection."""
        if self._reader_task is not None:
            with suppress(asyncio.CancelledError):
                await self._reader_task

    ## ---------------------------- Dispatch ---------------------------- ##
    async def handle_event(self, event: dict) -> None:
        """Dispatch one event. Failures are logged so the stream keeps going."""
        try:
            await self._dispatch(event)
        except Exception:
            logger.exception("Failed to handle %s event: %s", get_event_type(event), event)

    async def _dispatch(self, event: dict) -> None:
        event_type = get_event_type(event)
        if event_type == MATCH_ASSIGNED:
            name = event.get("name")
            if is_ignored_match(name) or self._on_match_queued is None:
                logger.debug("Ignoring queued match %r", name)
                return
            logger.info("Match queued: %s", name)
            resolved = await asyncio.to_thread(self.resolve_match, name)
            await _invoke(self._on_match_queued, resolved)
        elif event_type == MATCH_STARTED:
            logger.info("Match started")
            await _invoke(self._on_match_started)
        # TM sends plenty of other event types; none of them matter here.
