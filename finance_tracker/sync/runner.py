"""
Event Loop Thread

Streamlit runs every browser session on its own script thread. A single
SyncManager shared by those sessions must still see one event loop, since
its asyncio.Lock cannot be awaited from two loops. EventLoopThread keeps
one loop running on a daemon thread and runs submitted coroutines there;
callers on any thread block until their coroutine finishes.
"""

import asyncio
import threading
from typing import Any, Coroutine, TypeVar


T = TypeVar("T")


class EventLoopThread:
    """A long-lived event loop served by a background thread."""

    def __init__(self, name: str = "finance-tracker-loop"):
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._serve, name=name, daemon=True)
        self._thread.start()

    def _serve(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()

    @property
    def is_running(self) -> bool:
        return self._thread.is_alive()

    def run(self, coro: Coroutine[Any, Any, T]) -> T:
        """Run ``coro`` on the shared loop and wait for its result."""
        if not self.is_running:
            coro.close()
            raise RuntimeError("Event loop thread is stopped")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    def stop(self) -> None:
        if self.is_running:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join()
        self._loop.close()
