"""One-shot signal released once network discovery settles."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FutureTimeoutError

from zwredis.core.model import BarrierState

LOGGER = logging.getLogger(__name__)


class InitBarrier:
    """Resolves exactly once to ``READY`` or ``FAILED``.

    Later resolutions are ignored, so the waiting thread always observes the
    first terminal state.
    """

    def __init__(self) -> None:
        self._future: Future[BarrierState] = Future()
        self._lock = threading.Lock()

    @property
    def state(self) -> BarrierState:
        if not self._future.done():
            return BarrierState.WAITING
        return self._future.result()

    def resolve(self, state: BarrierState) -> bool:
        if state is BarrierState.WAITING:
            raise ValueError("Barrier can only resolve to a terminal state")
        with self._lock:
            if self._future.done():
                LOGGER.debug("Barrier already %s; ignoring %s", self._future.result().value, state.value)
                return False
            self._future.set_result(state)
        LOGGER.info("Initialization barrier resolved: %s", state.value)
        return True

    def wait(self, timeout_s: float | None = None) -> BarrierState:
        """Block until resolved; an elapsed timeout resolves the barrier as failed."""
        try:
            return self._future.result(timeout=timeout_s)
        except FutureTimeoutError:
            LOGGER.error("Network did not become ready within %.1fs", timeout_s)
            self.resolve(BarrierState.FAILED)
            return self._future.result()
