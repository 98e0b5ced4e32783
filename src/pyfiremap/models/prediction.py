"""Fire-risk prediction record."""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, Field, field_validator

from pyfiremap.models._base import FireMapBaseModel, safe_float

SCORE_FIELDS: tuple[str, ...] = ("vegetation_score", "structure_score", "hazard_score")


class Prediction(FireMapBaseModel):
    """One backend-computed fire-risk assessment for an address.

    Identity is implicit: two records with equal fields compare equal and
    repeated fetches may yield distinct objects for the same place.

    Parameters
    ----------
    address : str
        Address the prediction was computed for.
    lat : float
        Latitude in degrees.
    lng : float
        Longitude in degrees.
    vegetation_score : float
        Vegetation risk indicator.
    structure_score : float
        Structure risk indicator.
    hazard_score : float
        Hazard risk indicator.
    raw : dict
        Full backend payload.
    """

    address: str
    lat: float = Field(validation_alias=AliasChoices("lat", "latitude"))
    lng: float = Field(validation_alias=AliasChoices("lng", "lon", "longitude"))
    vegetation_score: float
    structure_score: float
    hazard_score: float

    @field_validator("address", mode="before")
    @classmethod
    def _coerce_address(cls, value: Any) -> Any:
        return value if value is None else str(value)

    @field_validator("lat", "lng", "vegetation_score", "structure_score", "hazard_score", mode="before")
    @classmethod
    def _coerce_floats(cls, value: Any) -> Any:
        parsed = safe_float(value)
        # Leave unparseable or non-finite input untouched so pydantic rejects it.
        return value if parsed is None else parsed

    @property
    def max_score(self) -> float:
        """Largest of the three risk scores (the heat weight)."""
        return max(self.vegetation_score, self.structure_score, self.hazard_score)

    def display_score(self, field_name: str) -> Any:
        """Score as the backend sent it, for verbatim display."""
        if field_name in self.raw:
            return self.raw[field_name]
        return getattr(self, field_name)
