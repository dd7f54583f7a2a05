"""
Console Runtime
===============

Runs an asyncio event loop on a daemon thread so a synchronous front end
(Streamlit reruns, the watch CLI) can host the poller. Anything touching
the poller is marshalled onto the loop thread with `call()`, which waits
for the result; `stop()` therefore returns only after the poller has
actually stopped.
"""

import asyncio
import logging
import threading
import weakref
from concurrent.futures import Future
from typing import Any, Callable, Optional

logger = logging.getLogger("AMHUB.Runtime")

CALL_TIMEOUT_S = 5.0


class ConsoleRuntime:
    """Background event loop owner."""

    def __init__(self, name: str = "amhub-poller"):
        self._name = name
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Event loop thread '{self._name}' started")

    def _run(self) -> None:
        asyncio.set_event_loop(self._loop)
        self._loop.run_forever()
        self._loop.close()

    def call(self, fn: Callable[..., Any], *args: Any, timeout: float = CALL_TIMEOUT_S) -> Any:
        """Run `fn(*args)` on the loop thread and return its result."""
        if not self.running:
            raise RuntimeError("Console runtime is not running")

        future: Future = Future()

        def invoke() -> None:
            try:
                future.set_result(fn(*args))
            except BaseException as e:
                future.set_exception(e)

        self._loop.call_soon_threadsafe(invoke)
        return future.result(timeout=timeout)

    def submit(self, fn: Callable[..., Any], *args: Any) -> None:
        """Schedule `fn(*args)` on the loop thread without waiting. No-op once stopped."""
        if self.running:
            self._loop.call_soon_threadsafe(fn, *args)

    def host(self, console) -> weakref.finalize:
        """
        Start a FleetConsole's poller on this loop for as long as the console lives.

        The poller is stopped once the console is garbage collected, e.g. when
        its browser session ends.
        """
        self.call(console.start_polling)
        return weakref.finalize(console, self.submit, console.poller.stop)

    def shutdown(self, before: Optional[Callable[[], Any]] = None) -> None:
        """Optionally run `before` on the loop (e.g. poller.stop), then stop the loop."""
        if not self.running:
            return
        if before is not None:
            self.call(before)
        self._loop.call_soon_threadsafe(self._loop.stop)
        self._thread.join(timeout=CALL_TIMEOUT_S)
        self._thread = None
        logger.debug(f"Event loop thread '{self._name}' stopped")
