"""
data/runner.py
A dedicated asyncio event loop running in a daemon thread.

Dash serves callbacks from its own worker threads; they hand work to this
loop instead of touching the session directly, so every store mutation and
every load happens on one thread.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Coroutine, Optional

logger = logging.getLogger(__name__)


class BackgroundLoop:
    def __init__(self, name: str = "session-loop"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._ready = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> "BackgroundLoop":
        if self.running:
            return self
        self._ready.clear()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        self._ready.wait()
        logger.info(f"Background loop '{self._name}' started.")
        return self

    def _run(self) -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        self._loop = loop
        self._ready.set()
        try:
            loop.run_forever()
        finally:
            pending = asyncio.all_tasks(loop)
            for task in pending:
                task.cancel()
            if pending:
                loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            loop.run_until_complete(loop.shutdown_default_executor())
            loop.close()

    def submit(self, coro: Coroutine[Any, Any, Any]) -> Future:
        """Schedule a coroutine on the loop. Returns a concurrent Future."""
        if not self.running or self._loop is None:
            coro.close()
            raise RuntimeError("background loop is not running")
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        future.add_done_callback(self._log_failure)
        return future

    def call(self, fn: Callable[..., Any], *args: Any) -> Future:
        """Run a plain callable on the loop thread."""

        async def _invoke():
            return fn(*args)

        return self.submit(_invoke())

    def stop(self, timeout: float = 5.0) -> None:
        if not self.running or self._loop is None:
            return
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout)
        logger.info(f"Background loop '{self._name}' stopped.")

    @staticmethod
    def _log_failure(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(f"Background task failed: {exc!r}")
