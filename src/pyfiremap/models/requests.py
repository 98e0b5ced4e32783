"""Request body models sent to the prediction backend."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_validator


class PredictRequest(BaseModel):
    """Body of ``POST /predict``.

    The address is sent exactly as typed; surrounding whitespace only
    matters for the emptiness check.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str

    @field_validator("address")
    @classmethod
    def _require_address(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("address must be non-empty")
        return value
