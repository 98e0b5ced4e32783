"""Base model and parsing helpers for backend payloads.

Every response model inherits from :class:`FireMapBaseModel` which
provides:

* ``extra="ignore"`` so additional backend fields never break parsing.
* ``allow_inf_nan=False`` so NaN or infinite numbers fail validation.
* A ``model_validator(mode="before")`` that stashes the backend
  payload in ``raw``.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


def safe_float(value: Any) -> float | None:
    """Convert *value* to a finite float, returning ``None`` on failure."""
    if value is None or isinstance(value, bool) or value == "":
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(result) or math.isinf(result):
        return None
    return result


class FireMapBaseModel(BaseModel):
    """Base for backend response models."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        allow_inf_nan=False,
    )

    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    """Original backend payload."""

    @model_validator(mode="before")
    @classmethod
    def _stash_raw(cls, values: Any) -> Any:
        if not isinstance(values, dict) or "raw" in values:
            return values
        merged = dict(values)
        merged["raw"] = dict(values)
        return merged
