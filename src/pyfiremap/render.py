"""Render layer: heat overlay plus clickable markers."""

from __future__ import annotations

import html
import logging
from collections.abc import Sequence
from typing import Any

from pyfiremap.config import HeatLayerOptions
from pyfiremap.map_provider import HeatPoint, MapProvider
from pyfiremap.models.prediction import Prediction
from pyfiremap.state.events import StoreChange

_logger = logging.getLogger(__name__)


def heat_weight(prediction: Prediction) -> float:
    """Heat weight of a prediction: its largest risk score."""
    return prediction.max_score


def heat_points(predictions: Sequence[Prediction]) -> list[HeatPoint]:
    return [(p.lat, p.lng, heat_weight(p)) for p in predictions]


def popup_html(prediction: Prediction) -> str:
    """Info popup body: address and the three scores as received."""
    return (
        f"<b>Address:</b> {html.escape(prediction.address)}<br>"
        f"<b>Vegetation:</b> {prediction.display_score('vegetation_score')}<br>"
        f"<b>Structure:</b> {prediction.display_score('structure_score')}<br>"
        f"<b>Hazard:</b> {prediction.display_score('hazard_score')}"
    )


class HeatmapRenderer:
    """Full-redraw renderer.

    Every call to :meth:`render` tears down the previous heat overlay and
    all previous markers before drawing the new state. There is no
    incremental diffing.
    """

    def __init__(self, provider: MapProvider, options: HeatLayerOptions | None = None) -> None:
        self._provider = provider
        self._options = options or HeatLayerOptions()
        self._heat_layer: Any | None = None
        self._markers: list[Any] = []

    @property
    def marker_count(self) -> int:
        return len(self._markers)

    def on_store_change(self, change: StoreChange) -> None:
        """Store listener: redraw with the post-change contents."""
        self.render(change.predictions)

    def render(self, predictions: Sequence[Prediction]) -> None:
        if not self._provider.is_ready:
            _logger.debug("Map not ready; skipping render of %d predictions", len(predictions))
            return

        self._teardown()

        self._heat_layer = self._provider.add_heat_layer(heat_points(predictions), self._options)
        for prediction in predictions:
            marker = self._provider.add_marker(prediction.lat, prediction.lng, popup_html(prediction))
            self._markers.append(marker)
        _logger.debug("Rendered %d predictions", len(predictions))

    def _teardown(self) -> None:
        if self._heat_layer is not None:
            self._provider.remove(self._heat_layer)
            self._heat_layer = None
        for marker in self._markers:
            self._provider.remove(marker)
        self._markers = []
