"""pyfiremap - Async fire-risk prediction map client."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyfiremap")
except PackageNotFoundError:
    __version__ = "0+local"
from pyfiremap.app import FireMapApp
from pyfiremap.config import FireMapConfig, HeatLayerOptions
from pyfiremap.exceptions import (
    FireMapApiError,
    FireMapConfigError,
    FireMapError,
    FireMapTransportError,
    FireMapValidationError,
    MapProviderError,
)
from pyfiremap.map_provider import FoliumMapProvider, MapProvider
from pyfiremap.models import Prediction, PredictRequest
from pyfiremap.render import HeatmapRenderer, heat_weight
from pyfiremap.state import ChangeSource, PredictionStore, StoreChange
from pyfiremap.sync import LogNotifier, Notifier, SyncLoop

__all__ = [
    "__version__",
    "ChangeSource",
    "FireMapApiError",
    "FireMapApp",
    "FireMapConfig",
    "FireMapConfigError",
    "FireMapError",
    "FireMapTransportError",
    "FireMapValidationError",
    "FoliumMapProvider",
    "HeatLayerOptions",
    "HeatmapRenderer",
    "LogNotifier",
    "MapProvider",
    "MapProviderError",
    "Notifier",
    "PredictRequest",
    "Prediction",
    "PredictionStore",
    "StoreChange",
    "SyncLoop",
    "heat_weight",
]
