"""Pydantic schemas for model-authored display configurations."""
from typing import Annotated, Any, Literal, Optional, Union
from pydantic import BaseModel, ConfigDict, Field


class _DisplayBase(BaseModel):
    # Unknown keys the model adds (e.g. "format" on a table) are kept as-is.
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    sql: str = Field(..., min_length=1)
    description: Optional[str] = None
    results: Optional[list[dict[str, Any]]] = None   # filled in after execution

    def with_results(self, rows: list[dict[str, Any]]):
        return self.model_copy(update={"results": rows})

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class TableDisplay(_DisplayBase):
    type: Literal["table"] = "table"
    columns: dict[str, str] = Field(default_factory=dict)   # {db_column: label}


class StatDisplay(_DisplayBase):
    type: Literal["stat"] = "stat"
    id: str
    name: str
    unit: Optional[str] = None
    format: Optional[str] = None


class AxisBinding(BaseModel):
    column: str
    label: str = ""


class ChartDisplay(_DisplayBase):
    type: Literal["chart"] = "chart"
    chart_type: Literal["bar", "line", "pie", "scatter"] = Field(..., alias="chartType")
    title: str = ""
    x_axis: AxisBinding = Field(..., alias="xAxis")
    y_axis: AxisBinding = Field(..., alias="yAxis")
    category: Optional[AxisBinding] = None


DisplayConfig = Annotated[Union[TableDisplay, StatDisplay, ChartDisplay], Field(discriminator="type")]

class GenerationResult(BaseModel):
    display: list[DisplayConfig]
    explanation: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        out: dict[str, Any] = {"display": [d.to_payload() for d in self.display]}
        if self.explanation is not None:
            out["explanation"] = self.explanation
        return out


class QueryContext(BaseModel):
    """The previous turn threaded into a follow-up request. Displays carry results."""
    query: str
    display: list[DisplayConfig]
    explanation: Optional[str] = None
