"""In-memory Prediction Store.

The sync loop is the only writer. Renderers subscribe and redraw on
every applied change.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from pyfiremap.models.prediction import Prediction
from pyfiremap.state.events import ChangeSource, StoreChange
from pyfiremap.state.policy import should_apply_replace

_logger = logging.getLogger(__name__)

StoreListener = Callable[[StoreChange], None]


class PredictionStore:
    """Ordered sequence of predictions, mirrored from the backend.

    After a successful fetch the contents equal exactly the fetched list;
    after a successful submission the new record is appended to whatever
    the store already holds. Nothing is deduplicated.
    """

    def __init__(self, *, discard_stale: bool = True) -> None:
        self._discard_stale = discard_stale
        self._predictions: list[Prediction] = []
        self._listeners: list[StoreListener] = []
        self._last_applied_sequence: int | None = None

    def __len__(self) -> int:
        return len(self._predictions)

    @property
    def last_applied_sequence(self) -> int | None:
        return self._last_applied_sequence

    def snapshot(self) -> tuple[Prediction, ...]:
        """Current contents; later mutations never show through."""
        return tuple(self._predictions)

    def subscribe(self, listener: StoreListener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: StoreListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def replace_all(self, predictions: Iterable[Prediction], *, sequence: int) -> bool:
        """Replace the contents with a fetched list.

        Returns ``False`` when the result was dropped as stale.
        """
        if not should_apply_replace(
            last_applied_sequence=self._last_applied_sequence,
            incoming_sequence=sequence,
            discard_stale=self._discard_stale,
        ):
            _logger.debug(
                "Dropping stale fetch #%d (last applied #%d)",
                sequence,
                self._last_applied_sequence,
            )
            return False

        self._predictions = list(predictions)
        self._mark_applied(sequence)
        self._notify(ChangeSource.FETCH, sequence)
        return True

    def append(self, prediction: Prediction, *, sequence: int) -> None:
        """Append a freshly submitted prediction."""
        self._predictions.append(prediction)
        self._mark_applied(sequence)
        self._notify(ChangeSource.SUBMIT, sequence)

    def _mark_applied(self, sequence: int) -> None:
        # Never move backwards; a late submit must not re-admit older fetches.
        if self._last_applied_sequence is None:
            self._last_applied_sequence = sequence
        else:
            self._last_applied_sequence = max(self._last_applied_sequence, sequence)

    def _notify(self, source: ChangeSource, sequence: int) -> None:
        change = StoreChange(source=source, sequence=sequence, predictions=self.snapshot())
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                _logger.error("Store listener failed for %s #%d", source, sequence, exc_info=True)
