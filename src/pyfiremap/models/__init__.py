"""Data models for prediction backend payloads."""

from pyfiremap.models._base import FireMapBaseModel, safe_float
from pyfiremap.models.prediction import SCORE_FIELDS, Prediction
from pyfiremap.models.requests import PredictRequest

__all__ = [
    "FireMapBaseModel",
    "PredictRequest",
    "Prediction",
    "SCORE_FIELDS",
    "safe_float",
]
