"""Prediction endpoints.

Endpoints:
  - GET /predictions (all predictions)
  - POST /predict (score one address)
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from pyfiremap._constants import PREDICT_ENDPOINT, PREDICTIONS_ENDPOINT
from pyfiremap._transport import Transport
from pyfiremap.exceptions import FireMapApiError, FireMapValidationError
from pyfiremap.models.prediction import Prediction
from pyfiremap.models.requests import PredictRequest

_logger = logging.getLogger(__name__)


def _parse_prediction(item: Any, endpoint: str) -> Prediction:
    if not isinstance(item, dict):
        raise FireMapApiError(
            f"{endpoint} returned {type(item).__name__}, expected an object",
            endpoint=endpoint,
        )
    try:
        return Prediction.model_validate(item)
    except ValidationError as exc:
        raise FireMapApiError(f"Invalid prediction from {endpoint}: {exc}", endpoint=endpoint) from exc


async def fetch_predictions(transport: Transport) -> list[Prediction]:
    """Fetch every stored prediction, in backend order."""
    data = await transport.get_json(PREDICTIONS_ENDPOINT)
    if not isinstance(data, list):
        raise FireMapApiError(
            f"{PREDICTIONS_ENDPOINT} returned {type(data).__name__}, expected a list",
            endpoint=PREDICTIONS_ENDPOINT,
        )
    predictions = [_parse_prediction(item, PREDICTIONS_ENDPOINT) for item in data]
    _logger.debug("Fetched %d predictions", len(predictions))
    return predictions


async def submit_prediction(transport: Transport, address: str) -> Prediction:
    """Ask the backend to score *address* and return the new record.

    Raises
    ------
    FireMapValidationError
        If *address* is empty; no request is issued.
    """
    try:
        request = PredictRequest(address=address)
    except ValidationError as exc:
        raise FireMapValidationError("address must be non-empty") from exc
    data = await transport.post_json(PREDICT_ENDPOINT, request.model_dump())
    return _parse_prediction(data, PREDICT_ENDPOINT)
