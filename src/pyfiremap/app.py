"""Application state object wiring provider, store, renderer and sync loop."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyfiremap._transport import JsonTransport, Transport
from pyfiremap.config import FireMapConfig
from pyfiremap.exceptions import FireMapError
from pyfiremap.map_provider import FoliumMapProvider, MapProvider
from pyfiremap.models.prediction import Prediction
from pyfiremap.render import HeatmapRenderer
from pyfiremap.state.events import StoreChange
from pyfiremap.state.store import PredictionStore
from pyfiremap.sync import Notifier, SyncLoop

_logger = logging.getLogger(__name__)


class FireMapApp:
    """Owns every piece of mutable state: map, heat layer, markers, predictions.

    Usage::

        provider = FoliumMapProvider(config)
        async with FireMapApp(config, provider=provider) as app:
            await app.start()
            await app.submit_one("123 Oak St")
            provider.save("map.html")
    """

    def __init__(
        self,
        config: FireMapConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
        provider: MapProvider | None = None,
        notifier: Notifier | None = None,
        on_render: Callable[[StoreChange], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._injected_transport = transport
        self._notifier = notifier
        self._on_render = on_render

        self.provider: MapProvider = provider or FoliumMapProvider(config)
        self.store = PredictionStore(discard_stale=config.discard_stale_responses)
        self.renderer = HeatmapRenderer(self.provider, config.heat)
        self._sync: SyncLoop | None = None
        self._periodic: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> FireMapApp:
        transport = self._injected_transport
        if transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            transport = JsonTransport(self._config, self._http_session)
        self._sync = SyncLoop(
            transport,
            self.store,
            refresh_interval=self._config.refresh_interval,
            notifier=self._notifier,
        )
        self.store.subscribe(self.renderer.on_store_change)
        if self._on_render is not None:
            self.store.subscribe(self._on_render)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.stop()
        self.store.unsubscribe(self.renderer.on_store_change)
        if self._on_render is not None:
            self.store.unsubscribe(self._on_render)
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        self._sync = None

    def _require_sync(self) -> SyncLoop:
        if self._sync is None:
            raise FireMapError("App not initialized. Use 'async with FireMapApp(...) as app:'")
        return self._sync

    @property
    def predictions(self) -> tuple[Prediction, ...]:
        return self.store.snapshot()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self, *, periodic: bool = True) -> None:
        """Wait for the map, load existing predictions, then start the timer."""
        sync = self._require_sync()
        await self.provider.wait_ready(self._config.map_ready_timeout)
        await sync.refresh_all()
        if periodic and self._periodic is None:
            _logger.debug("Refreshing predictions every %.1fs", self._config.refresh_interval)
            self._periodic = asyncio.get_running_loop().create_task(sync.run_periodic())

    async def stop(self) -> None:
        periodic = self._periodic
        self._periodic = None
        if periodic is not None:
            periodic.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await periodic
        if self._sync is not None:
            await self._sync.aclose()

    async def run_forever(self) -> None:
        """Block until cancelled while the periodic refresh runs."""
        await self.start()
        assert self._periodic is not None  # noqa: S101
        await self._periodic

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def refresh_all(self) -> bool:
        return await self._require_sync().refresh_all()

    async def submit_one(self, address: str) -> Prediction | None:
        return await self._require_sync().submit_one(address)
