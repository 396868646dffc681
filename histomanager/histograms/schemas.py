"""Histogram booking schemas.

A configuration record describes one histogram: its kind, name, title and
binning, plus an optional output sub-directory. Records are transient: they
are validated, consumed to build one ``hist.Hist`` and then discarded.

Key design: the kind tag decides which of the four registry collections an
object lands in, so lookups never need to inspect the constructed object.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


# ============================================================================
# Enums
# ============================================================================


class HistogramCollection(str, Enum):
    """The four name-keyed collections held by the registry."""

    HISTO_1D = "histo_1d"       # TH1F, TH1D
    HISTO_2D = "histo_2d"       # TH2F, TH2D
    PROFILE_1D = "profile_1d"   # TProfile
    PROFILE_2D = "profile_2d"   # TProfile2D

    @property
    def ndim(self) -> int:
        """Number of binned axes of the objects in this collection."""
        if self in (HistogramCollection.HISTO_2D, HistogramCollection.PROFILE_2D):
            return 2
        return 1

    @property
    def is_profile(self) -> bool:
        return self in (HistogramCollection.PROFILE_1D, HistogramCollection.PROFILE_2D)


class HistogramKind(str, Enum):
    """Histogram kinds accepted in configuration files.

    Values are the ROOT class names used as the type token.
    """

    TH1F = "TH1F"
    TH1D = "TH1D"
    TPROFILE = "TProfile"
    TH2F = "TH2F"
    TH2D = "TH2D"
    TPROFILE2D = "TProfile2D"

    @property
    def collection(self) -> HistogramCollection:
        return KIND_COLLECTIONS[self]

    @property
    def ndim(self) -> int:
        return self.collection.ndim

    @property
    def is_profile(self) -> bool:
        return self.collection.is_profile

    @property
    def single_precision(self) -> bool:
        """Whether ROOT would store bin contents as float rather than double."""
        return self in (HistogramKind.TH1F, HistogramKind.TH2F)

    @classmethod
    def from_token(cls, token: str) -> Optional["HistogramKind"]:
        """Map a configuration type token to a kind, or None if unknown."""
        try:
            return cls(token)
        except ValueError:
            return None


KIND_COLLECTIONS: dict[HistogramKind, HistogramCollection] = {
    HistogramKind.TH1F: HistogramCollection.HISTO_1D,
    HistogramKind.TH1D: HistogramCollection.HISTO_1D,
    HistogramKind.TPROFILE: HistogramCollection.PROFILE_1D,
    HistogramKind.TH2F: HistogramCollection.HISTO_2D,
    HistogramKind.TH2D: HistogramCollection.HISTO_2D,
    HistogramKind.TPROFILE2D: HistogramCollection.PROFILE_2D,
}


def _check_name(name: str) -> None:
    if "/" in name:
        raise ValueError(f"name {name!r} must not contain '/'; use the directory field")


def _check_axis(axis: str, low: float, high: float) -> None:
    if high <= low:
        raise ValueError(f"{axis}max ({high}) must be greater than {axis}min ({low})")


# ============================================================================
# Configuration records
# ============================================================================


class HistoConfig1D(BaseModel):
    """Booking record for a one-axis histogram or profile."""

    kind: HistogramKind = Field(
        default=HistogramKind.TH1F,
        description="One-axis kind: TH1F, TH1D or TProfile",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Unique name without '/'; also the key under which the object is written",
    )
    title: str = Field(
        default="",
        description="Display title, optionally 'title;x label;y label'",
    )
    nbinsx: int = Field(..., ge=1, description="Number of bins on the x axis")
    xmin: float = Field(..., allow_inf_nan=False, description="Lower edge of the x axis")
    xmax: float = Field(..., allow_inf_nan=False, description="Upper edge of the x axis")
    directory: str = Field(
        default="",
        description="Slash-delimited sub-directory in the output file ('' = top level)",
        examples=["", "data", "data/sub"],
    )

    @model_validator(mode="after")
    def validate_binning(self) -> "HistoConfig1D":
        """Reject two-axis kinds, path-like names and empty ranges."""
        if self.kind.ndim != 1:
            raise ValueError(f"{self.kind.value} is not a one-axis kind")
        _check_name(self.name)
        _check_axis("x", self.xmin, self.xmax)
        return self


class HistoConfig2D(BaseModel):
    """Booking record for a two-axis histogram or profile."""

    kind: HistogramKind = Field(
        default=HistogramKind.TH2F,
        description="Two-axis kind: TH2F, TH2D or TProfile2D",
    )
    name: str = Field(
        ...,
        min_length=1,
        description="Unique name without '/'; also the key under which the object is written",
    )
    title: str = Field(
        default="",
        description="Display title, optionally 'title;x label;y label'",
    )
    nbinsx: int = Field(..., ge=1, description="Number of bins on the x axis")
    xmin: float = Field(..., allow_inf_nan=False, description="Lower edge of the x axis")
    xmax: float = Field(..., allow_inf_nan=False, description="Upper edge of the x axis")
    nbinsy: int = Field(..., ge=1, description="Number of bins on the y axis")
    ymin: float = Field(..., allow_inf_nan=False, description="Lower edge of the y axis")
    ymax: float = Field(..., allow_inf_nan=False, description="Upper edge of the y axis")
    directory: str = Field(
        default="",
        description="Slash-delimited sub-directory in the output file ('' = top level)",
    )

    @model_validator(mode="after")
    def validate_binning(self) -> "HistoConfig2D":
        """Reject one-axis kinds, path-like names and empty ranges."""
        if self.kind.ndim != 2:
            raise ValueError(f"{self.kind.value} is not a two-axis kind")
        _check_name(self.name)
        _check_axis("x", self.xmin, self.xmax)
        _check_axis("y", self.ymin, self.ymax)
        return self


# ============================================================================
# Summaries
# ============================================================================


class HistogramSummary(BaseModel):
    """Lightweight description of a registered object."""

    name: str
    kind: HistogramKind
    collection: HistogramCollection
    title: str = ""
    nbinsx: int
    xmin: float
    xmax: float
    nbinsy: Optional[int] = None
    ymin: Optional[float] = None
    ymax: Optional[float] = None
    directory: str = ""
