"""Sync loop: periodic fetch of all predictions plus on-demand submission."""

from __future__ import annotations

import asyncio
import itertools
import logging
from typing import Protocol

from pyfiremap._api.predictions import fetch_predictions, submit_prediction
from pyfiremap._constants import MSG_EMPTY_ADDRESS, MSG_PREDICT_FAILED
from pyfiremap._transport import Transport
from pyfiremap.exceptions import FireMapError
from pyfiremap.models.prediction import Prediction
from pyfiremap.state.store import PredictionStore

_logger = logging.getLogger(__name__)


class Notifier(Protocol):
    """User-facing alert surface."""

    def alert(self, message: str) -> None:
        ...


class LogNotifier:
    """Notifier that only logs; used when no UI is attached."""

    def alert(self, message: str) -> None:
        _logger.warning("ALERT: %s", message)


class SyncLoop:
    """Keeps a :class:`PredictionStore` aligned with the backend.

    All failures are caught here, at the call site: reads are logged and
    ignored (stale data stays displayed), writes are logged and surfaced
    through the notifier. There is no retry or backoff; the periodic timer
    is the only retry for reads.
    """

    def __init__(
        self,
        transport: Transport,
        store: PredictionStore,
        *,
        refresh_interval: float,
        notifier: Notifier | None = None,
    ) -> None:
        self._transport = transport
        self._store = store
        self._refresh_interval = refresh_interval
        self._notifier: Notifier = notifier or LogNotifier()
        self._sequence = itertools.count(1)
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def pending_refreshes(self) -> int:
        return len(self._pending)

    def _next_sequence(self) -> int:
        return next(self._sequence)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def refresh_all(self) -> bool:
        """Fetch every prediction and replace the store contents.

        Never raises for backend failures. Returns ``True`` when the store
        was updated.
        """
        sequence = self._next_sequence()
        try:
            predictions = await fetch_predictions(self._transport)
        except FireMapError as exc:
            _logger.error("Failed to fetch predictions (#%d): %s", sequence, exc)
            return False
        return self._store.replace_all(predictions, sequence=sequence)

    async def submit_one(self, address: str) -> Prediction | None:
        """Request a prediction for *address* and append it to the store.

        An empty address is rejected with an alert and no request. Returns
        the new record, or ``None`` if nothing was added.
        """
        if not address or not address.strip():
            self._notifier.alert(MSG_EMPTY_ADDRESS)
            return None

        sequence = self._next_sequence()
        try:
            prediction = await submit_prediction(self._transport, address)
        except FireMapError as exc:
            _logger.error("Failed to predict fire risk for %r (#%d): %s", address, sequence, exc)
            self._notifier.alert(MSG_PREDICT_FAILED)
            return None

        self._store.append(prediction, sequence=sequence)
        return prediction

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule_refresh(self) -> asyncio.Task[bool]:
        """Issue an independent :meth:`refresh_all` task.

        Earlier refreshes that are still in flight are left running.
        """
        task = asyncio.get_running_loop().create_task(self.refresh_all())
        self._pending.add(task)
        task.add_done_callback(self._on_refresh_done)
        return task

    def _on_refresh_done(self, task: asyncio.Task[bool]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            _logger.error("Refresh task crashed", exc_info=exc)

    async def run_periodic(self) -> None:
        """Issue a refresh every ``refresh_interval`` seconds, forever.

        Ticks are unconditional: a tick fires even when earlier refreshes
        are still pending.
        """
        while True:
            await asyncio.sleep(self._refresh_interval)
            self.schedule_refresh()

    async def aclose(self) -> None:
        """Cancel refreshes still in flight (shutdown only)."""
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        self._pending.clear()
