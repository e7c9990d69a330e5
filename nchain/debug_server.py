"""WebSocket broadcaster that streams Debugger records to connected clients."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from aiohttp import WSMsgType, web

from .debugger import Debugger, DebugRecord

logger = logging.getLogger(__name__)


def _encode(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return repr(value)


def dumps_record(record: DebugRecord) -> str:
    return json.dumps(record.to_dict(), default=_encode)


class DebugServer:
    """Serve ``ws://host:port/`` and forward every dispatched record as JSON."""

    def __init__(self, debugger: Debugger, host: str = "localhost", port: int = 1414) -> None:
        self.debugger = debugger
        self.host = host
        self.port = port
        self._app = web.Application()
        self._app.router.add_get("/", self._handle)
        self._runner: web.AppRunner | None = None
        self._clients: set[web.WebSocketResponse] = set()

    @property
    def started(self) -> bool:
        return self._runner is not None

    @property
    def clients(self) -> int:
        return len(self._clients)

    async def start(self) -> None:
        if self._runner is not None:
            logger.warning("Debug WebSocket server already started")
            return
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        logger.info("Debug WebSocket server listening on ws://%s:%s", self.host, self.port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        for ws in list(self._clients):
            await ws.close()
        await self._runner.cleanup()
        self._runner = None

    async def _handle(self, request: web.Request) -> web.WebSocketResponse:
        ws = web.WebSocketResponse()
        await ws.prepare(request)
        self._clients.add(ws)
        queue = self.debugger.subscribe()
        logger.info("Debug client connected")
        forwarder = asyncio.create_task(self._forward(ws, queue))
        try:
            async for msg in ws:
                if msg.type == WSMsgType.ERROR:
                    break
        finally:
            forwarder.cancel()
            self.debugger.unsubscribe(queue)
            self._clients.discard(ws)
            logger.info("Debug client disconnected")
        return ws

    async def _forward(self, ws: web.WebSocketResponse, queue: asyncio.Queue[DebugRecord]) -> None:
        while not ws.closed:
            record = await queue.get()
            try:
                await ws.send_str(dumps_record(record))
            except ConnectionResetError:
                return
