"""State/store layer.

This package holds the Prediction Store, the single in-memory source of
truth for what the map currently shows. Only the sync loop writes to it.
"""

from pyfiremap.state.events import ChangeSource, StoreChange
from pyfiremap.state.store import PredictionStore

__all__ = ["ChangeSource", "PredictionStore", "StoreChange"]
