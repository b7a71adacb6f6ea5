"""Pydantic models for extracted records, per-target outcomes and batches.

``ArtistProfile`` is the one canonical record shape produced for a target:
scalar fields plus a fixed-length list of nested city entries. Outcomes
are a discriminated union on ``status`` so a target carries either a
record or an error, never both.
"""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class CityListeners(BaseModel):
    """One entry of a grouped field: a label and its listener count."""

    model_config = ConfigDict(frozen=True)

    label: str
    count: int = Field(ge=0)


class ArtistProfile(BaseModel):
    """Structured data extracted from one artist's audience dialog.

    Every attribute is always populated, either with a scraped value or
    with the configured default for that field.
    """

    model_config = ConfigDict(frozen=True)

    artist_name: str
    image_src: str
    username: str
    followers: int = Field(ge=0)
    monthly_listeners: int = Field(ge=0)
    cities: tuple[CityListeners, ...]
    social_link: str


class TargetSuccess(BaseModel):
    """Outcome of a target whose dialog was opened and extracted."""

    model_config = ConfigDict(frozen=True)

    status: Literal["success"] = "success"
    target_id: str
    record: ArtistProfile
    duration_ms: float = Field(ge=0.0)


class TargetFailure(BaseModel):
    """Outcome of a target that could not be navigated or activated."""

    model_config = ConfigDict(frozen=True)

    status: Literal["failure"] = "failure"
    target_id: str
    error: str
    duration_ms: float = Field(default=0.0, ge=0.0)


TargetOutcome = Annotated[TargetSuccess | TargetFailure, Field(discriminator="status")]


class BatchResult(BaseModel):
    """Ordered outcomes of a batch plus its total duration.

    Attributes:
        results: One outcome per processed target, in input order.
        total_duration_ms: First navigation start to session close.
        cancelled: True when the batch stopped early on request.
    """

    model_config = ConfigDict(frozen=True)

    results: tuple[TargetOutcome, ...]
    total_duration_ms: float = Field(ge=0.0)
    cancelled: bool = False

    @computed_field
    @property
    def total_duration_sec(self) -> str:
        """Total duration in seconds, two decimals."""
        return f"{self.total_duration_ms / 1000:.2f}"

    @property
    def succeeded(self) -> int:
        return sum(1 for outcome in self.results if outcome.status == "success")

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded

    @property
    def success_rate(self) -> float:
        """Ratio of successful targets, 0.0 for an empty batch."""
        if not self.results:
            return 0.0
        return self.succeeded / len(self.results)
