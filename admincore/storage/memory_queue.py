"""In-process message queue with retrying consumers."""

from __future__ import annotations

import queue
import threading
import time
import uuid

from admincore.storage.message import Message
from admincore.storage.types import ConsumerFunc, QueueAdapter

_MAX_RETRIES = 3


class MemoryQueue(QueueAdapter):
    """A queue whose streams live in memory and are consumed by threads."""

    retry_interval = 1.0

    def __init__(self, pool_num: int) -> None:
        self.pool_num = pool_num
        self._streams: dict[str, queue.Queue] = {}
        self._lock = threading.Lock()
        self._running = threading.Condition()
        self._pending = 0

    def __str__(self) -> str:
        return "memory"

    def _queue_for(self, stream: str) -> queue.Queue:
        with self._lock:
            q = self._streams.get(stream)
            if q is None:
                q = queue.Queue(maxsize=max(self.pool_num, 0))
                self._streams[stream] = q
            return q

    def append(self, message: Message) -> None:
        copied = Message(id=message.id, stream=message.stream, values=message.values)
        target = self._queue_for(message.stream)

        def deliver() -> None:
            copied.id = str(uuid.uuid4())
            target.put(copied)

        threading.Thread(target=deliver, daemon=True).start()

    def register(self, name: str, consumer: ConsumerFunc) -> None:
        source = self._queue_for(name)

        def consume() -> None:
            while True:
                message = source.get()
                try:
                    consumer(message)
                except Exception:
                    if message.error_count < _MAX_RETRIES:
                        message.error_count += 1
                        time.sleep(self.retry_interval * message.error_count)
                        source.put(message)

        threading.Thread(target=consume, daemon=True).start()

    def run(self) -> None:
        with self._running:
            self._pending += 1
            self._running.wait_for(lambda: self._pending == 0)

    def shutdown(self) -> None:
        with self._running:
            if self._pending == 0:
                raise RuntimeError("queue is not running")
            self._pending -= 1
            self._running.notify_all()