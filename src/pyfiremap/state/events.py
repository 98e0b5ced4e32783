"""Store change notifications."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from pyfiremap.models.prediction import Prediction


class ChangeSource(StrEnum):
    FETCH = "fetch"
    SUBMIT = "submit"


class StoreChange(BaseModel):
    """Emitted to store listeners after every applied mutation."""

    model_config = ConfigDict(frozen=True)

    source: ChangeSource
    sequence: int = Field(..., ge=0, description="Sequence number of the request that produced the change")
    predictions: tuple[Prediction, ...] = Field(default_factory=tuple, description="Store contents after the change")
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
