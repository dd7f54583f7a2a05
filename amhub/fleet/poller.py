"""
Topology Poller
===============
Author: AMHUB Member
Date: 2026-10-18

Drives fetch -> normalize on a fixed cadence inside an asyncio event loop
and classifies every cycle into a LinkHealth state.

- The first fetch is issued immediately (foreground: raises on_loading),
  then one background fetch per interval until stopped.
- Blocking fetch functions run in the loop's default executor; coroutine
  functions are awaited directly.
- Every fetch is tagged with an increasing sequence number. A completion
  older than the last applied one is discarded, so a slow early response
  can never overwrite a newer one.
- On AuthError / any other failure the last snapshot is kept (last known
  good) and only the health changes.
- After stop() returns no callback fires.

Usage:
    poller = Poller(client.fetch_topology)
    poller.start(1000, on_snapshot=show, on_health=indicator)
    ...
    poller.stop()
"""

import asyncio
import inspect
import logging
import time
from typing import Any, Callable, Optional, Set

from amhub.core.logging_config import log_exception
from .errors import AuthError, UpstreamError
from .models import (
    EMPTY_SNAPSHOT,
    DeviceSnapshot,
    Healthy,
    LinkHealth,
    LinkStatus,
    Unauthorized,
    Unhealthy,
)
from .normalizer import normalize

logger = logging.getLogger("AMHUB.Poller")

DEFAULT_INTERVAL_MS = 1000

SnapshotCallback = Callable[[DeviceSnapshot], None]
HealthCallback = Callable[[LinkHealth], None]
LoadingCallback = Callable[[bool], None]


class Poller:
    """
    Fixed-cadence topology poller with most-recent-wins semantics.

    The poller is the only writer of the device snapshot; readers get
    immutable DeviceSnapshot objects through on_snapshot or `snapshot`.
    """

    def __init__(
        self,
        fetch: Callable[[], Any],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        normalizer: Callable[[Any], DeviceSnapshot] = normalize,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            fetch: Returns a raw topology body (sync or async callable)
            interval_ms: Default background cadence
            normalizer: Raw body -> DeviceSnapshot
            clock: Wall clock used for the last successful poll time
        """
        self._fetch = fetch
        self._normalize = normalizer
        self._clock = clock
        self.interval_ms = interval_ms

        self.snapshot: DeviceSnapshot = EMPTY_SNAPSHOT
        self.health: LinkHealth = Unhealthy("No poll completed yet")
        self.last_poll_time: float = 0.0

        self._on_snapshot: Optional[SnapshotCallback] = None
        self._on_health: Optional[HealthCallback] = None
        self._on_loading: Optional[LoadingCallback] = None

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._ticker: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()
        self._loading_seqs: Set[int] = set()
        self._issued_seq = 0
        self._applied_seq = 0
        self._stopped = True

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def running(self) -> bool:
        return not self._stopped

    def start(
        self,
        interval_ms: Optional[int] = None,
        on_snapshot: Optional[SnapshotCallback] = None,
        on_health: Optional[HealthCallback] = None,
        on_loading: Optional[LoadingCallback] = None,
    ) -> None:
        """
        Start polling on the running event loop.

        Raises:
            RuntimeError: If already running or called outside an event loop
        """
        if self.running:
            raise RuntimeError("Poller already running")
        if interval_ms is not None:
            if interval_ms <= 0:
                raise ValueError(f"interval_ms must be positive, got {interval_ms}")
            self.interval_ms = interval_ms

        self._loop = asyncio.get_running_loop()
        self._on_snapshot = on_snapshot
        self._on_health = on_health
        self._on_loading = on_loading
        self._stopped = False
        self._ticker = self._loop.create_task(self._tick_forever())
        logger.info(f"Polling started ({self.interval_ms} ms)")

    def stop(self) -> None:
        """Stop polling. Pending completions become no-ops. Must run on the loop thread."""
        if self._stopped:
            return
        # Clear the loading flag before completions go silent
        if self._loading_seqs:
            self._emit(self._on_loading, False)
        self._loading_seqs.clear()
        self._stopped = True
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None
        for task in list(self._in_flight):
            task.cancel()
        self._in_flight.clear()
        logger.info("Polling stopped")

    def refresh(self) -> None:
        """Issue one extra foreground fetch now (manual refresh)."""
        if self._stopped:
            logger.debug("Refresh ignored: poller is stopped")
            return
        self._launch(foreground=True)

    async def _tick_forever(self) -> None:
        self._launch(foreground=True)
        while True:
            await asyncio.sleep(self.interval_ms / 1000.0)
            self._launch(foreground=False)

    def _launch(self, foreground: bool) -> None:
        self._issued_seq += 1
        task = self._loop.create_task(self._cycle(self._issued_seq, foreground))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    # =========================================================================
    # One cycle
    # =========================================================================

    async def _cycle(self, seq: int, foreground: bool) -> None:
        if foreground:
            self._loading_seqs.add(seq)
            self._emit(self._on_loading, True)
        try:
            health = await self.poll_once()
        finally:
            if seq in self._loading_seqs:
                self._loading_seqs.discard(seq)
                self._emit(self._on_loading, False)
        self._apply(seq, health)

    async def poll_once(self) -> LinkHealth:
        """Fetch and normalize once; every failure becomes a health state."""
        try:
            if inspect.iscoroutinefunction(self._fetch):
                body = await self._fetch()
            else:
                body = await asyncio.get_running_loop().run_in_executor(None, self._fetch)
            snapshot = self._normalize(body)
        except AuthError as e:
            return Unauthorized(str(e))
        except UpstreamError as e:
            return Unhealthy(str(e))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            log_exception(logger, e, context="Unexpected failure during topology poll")
            return Unhealthy(f"{type(e).__name__}: {e}")
        return Healthy(snapshot=snapshot, polled_at=self._clock())

    def _apply(self, seq: int, health: LinkHealth) -> None:
        if self._stopped:
            return
        if seq < self._applied_seq:
            logger.debug(f"Discarding stale poll #{seq} (already applied #{self._applied_seq})")
            return
        first = self._applied_seq == 0
        self._applied_seq = seq

        previous = self.health
        self.health = health
        self._log_transition(None if first else previous, health)

        if isinstance(health, Healthy):
            self.snapshot = health.snapshot
            self.last_poll_time = health.polled_at
            self._emit(self._on_snapshot, health.snapshot)
        self._emit(self._on_health, health)

    def _emit(self, callback: Optional[Callable], value: Any) -> None:
        if callback is None or self._stopped:
            return
        try:
            callback(value)
        except Exception as e:
            log_exception(logger, e, context=f"Poller callback {getattr(callback, '__name__', callback)!r} failed")

    @staticmethod
    def _log_transition(previous: Optional[LinkHealth], current: LinkHealth) -> None:
        """Log once per status change, not every cycle."""
        if previous is not None and previous.status == current.status:
            return
        if current.status is LinkStatus.HEALTHY:
            logger.info(f"Link healthy: {current.snapshot.message} ({len(current.snapshot)} drone(s))")
        elif current.status is LinkStatus.UNAUTHORIZED:
            logger.warning(f"Link unauthorized: {current.reason}")
        else:
            logger.warning(f"Link unhealthy: {current.reason}")
