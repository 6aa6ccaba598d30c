from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field, model_validator

from ..domain.types import PlotKind

Series = dict[str, Any]
CellValue = str | None
ValueCounts = list[tuple[CellValue, int]]


class PlotRequest(BaseModel):
    """Validated parameters used to derive chart data from a stored CSV.

    Clients send ``null`` for unused axes; the pre-validator turns a null
    ``y_axes`` back into an empty list so the kind checks see one shape.
    """
    plot_type: PlotKind
    x_axis: str | None = None
    y_axes: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _coerce_nulls(cls, values: Any) -> Any:
        if isinstance(values, dict):
            if values.get("y_axes") is None:
                values["y_axes"] = []
            if values.get("x_axis") == "":
                values["x_axis"] = None
        return values


@dataclass(frozen=True)
class PlotResult:
    """Chart-ready series plus the layout description."""
    data: list[Series]
    layout: dict[str, Any] = field(default_factory=dict)

    def as_dict(self) -> dict[str, Any]:
        return {"data": self.data, "layout": self.layout}
