"""Debugger - best-effort telemetry channel for threads and collections.

Records are ``{name, timestamp, payload}`` triples. Delivery never blocks the
dispatching thread: sinks are plain callables invoked inline, subscriber
queues are fed with ``put_nowait`` and drop records once full.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

Sink = Callable[["DebugRecord"], None]


@dataclass
class DebugRecord:
    name: str
    payload: Any
    timestamp: float = field(default_factory=lambda: time.monotonic() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "timestamp": self.timestamp, "payload": self.payload}


class Debugger:
    """Explicit observer object injected into Collection and Thread."""

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self._sinks: list[Sink] = []
        self._queues: list[asyncio.Queue[DebugRecord]] = []

    @property
    def attached(self) -> bool:
        return bool(self._sinks or self._queues)

    def attach(self, sink: Sink) -> Sink:
        if sink not in self._sinks:
            self._sinks.append(sink)
        return sink

    def detach(self, sink: Sink) -> None:
        if sink in self._sinks:
            self._sinks.remove(sink)

    def subscribe(self, maxsize: int = 1000) -> asyncio.Queue[DebugRecord]:
        queue: asyncio.Queue[DebugRecord] = asyncio.Queue(maxsize=maxsize)
        self._queues.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[DebugRecord]) -> None:
        if queue in self._queues:
            self._queues.remove(queue)

    def dispatch(self, name: str, payload: Any) -> None:
        if not self.enabled or not self.attached:
            return
        record = DebugRecord(name=name, payload=payload)
        for sink in list(self._sinks):
            try:
                sink(record)
            except Exception:
                logger.exception("Debugger sink error for %s", name)
        for queue in list(self._queues):
            try:
                queue.put_nowait(record)
            except asyncio.QueueFull:
                logger.debug("Dropping %s record, subscriber queue full", name)
