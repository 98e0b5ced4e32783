"""Map provider adapter backed by folium (Leaflet)."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path
from typing import Any, Protocol

import folium
from folium.plugins import HeatMap

from pyfiremap._constants import (
    FALLBACK_TILES,
    GOOGLE_MAP_TYPES,
    GOOGLE_TILES_ATTRIBUTION,
    GOOGLE_TILES_URL,
)
from pyfiremap._redact import redact_url
from pyfiremap.config import FireMapConfig, HeatLayerOptions
from pyfiremap.exceptions import MapProviderError

_logger = logging.getLogger(__name__)

HeatPoint = tuple[float, float, float]


class MapProvider(Protocol):
    """What the render layer needs from a map.

    Handles returned by the ``add_*`` methods are opaque; pass them back to
    :meth:`remove` to detach them. The provider never removes layers on
    its own.
    """

    def add_heat_layer(self, points: Sequence[HeatPoint], options: HeatLayerOptions) -> Any:
        ...

    def add_marker(self, lat: float, lng: float, popup_html: str) -> Any:
        ...

    def remove(self, handle: Any) -> None:
        ...

    @property
    def is_ready(self) -> bool:
        ...

    async def wait_ready(self, timeout: float | None = None) -> Any:
        ...


class FoliumMapProvider:
    """Loads a folium map once and exposes a single-shot ready signal.

    Usage::

        provider = FoliumMapProvider(config)
        await provider.initialize()
        provider.save("map.html")
    """

    def __init__(self, config: FireMapConfig) -> None:
        self._config = config
        self._map: folium.Map | None = None
        self._ready: asyncio.Future[folium.Map] | None = None

    def initialize(self) -> asyncio.Future[folium.Map]:
        """Start loading the provider and return its ready future.

        Loading happens exactly once; later calls return the same future.
        There is no retry: if loading fails the error is logged and the
        future never resolves.
        """
        if self._ready is None:
            loop = asyncio.get_running_loop()
            self._ready = loop.create_future()
            loop.call_soon(self._load)
        return self._ready

    async def wait_ready(self, timeout: float | None = None) -> folium.Map:
        """Wait for :meth:`initialize` to complete.

        Raises
        ------
        MapProviderError
            If *timeout* elapses before the provider is ready.
        """
        ready = self.initialize()
        try:
            return await asyncio.wait_for(asyncio.shield(ready), timeout)
        except TimeoutError as exc:
            raise MapProviderError(f"Map provider not ready after {timeout}s") from exc

    @property
    def is_ready(self) -> bool:
        return self._map is not None

    @property
    def map(self) -> folium.Map:
        if self._map is None:
            raise MapProviderError("Map provider not initialized; await initialize() first")
        return self._map

    def _load(self) -> None:
        assert self._ready is not None  # noqa: S101
        try:
            fmap = self._build_map()
        except Exception:
            _logger.error("Map provider failed to load", exc_info=True)
            return
        self._map = fmap
        if not self._ready.done():
            self._ready.set_result(fmap)
        _logger.debug("Map provider ready at %s zoom %d", self._config.center, self._config.zoom)

    def _build_map(self) -> folium.Map:
        config = self._config
        if not config.maps_api_key:
            return folium.Map(location=list(config.center), zoom_start=config.zoom, tiles=FALLBACK_TILES)

        lyrs = GOOGLE_MAP_TYPES.get(config.map_type)
        if lyrs is None:
            raise MapProviderError(f"Unknown map type {config.map_type!r}")
        tiles_url = GOOGLE_TILES_URL.format(lyrs=lyrs, key=config.maps_api_key)
        _logger.debug("Loading tiles from %s", redact_url(tiles_url))

        fmap = folium.Map(location=list(config.center), zoom_start=config.zoom, tiles=None)
        folium.TileLayer(tiles=tiles_url, attr=GOOGLE_TILES_ATTRIBUTION, name=config.map_type).add_to(fmap)
        return fmap

    # ------------------------------------------------------------------
    # Layers
    # ------------------------------------------------------------------

    def add_heat_layer(self, points: Sequence[HeatPoint], options: HeatLayerOptions) -> HeatMap:
        if not options.dissipating:
            # Leaflet.heat sizes points in screen pixels, which always dissipates on zoom.
            _logger.debug("dissipating=False is not supported by the folium heat layer")
        layer = HeatMap(
            data=[[lat, lng, weight] for lat, lng, weight in points],
            name="Fire risk",
            radius=options.radius,
            min_opacity=options.opacity,
        )
        layer.add_to(self.map)
        return layer

    def add_marker(self, lat: float, lng: float, popup_html: str) -> folium.Marker:
        marker = folium.Marker(location=[lat, lng], popup=folium.Popup(popup_html, max_width=300))
        marker.add_to(self.map)
        return marker

    def remove(self, handle: Any) -> None:
        self.map._children.pop(handle.get_name(), None)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def to_html(self) -> str:
        """Render the full-viewport map page."""
        return self.map.get_root().render()

    def save(self, path: str | Path) -> None:
        self.map.save(str(path))
