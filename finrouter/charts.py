"""
Declarative description of the structured chart data the chat UI renders.

``CHART_TOOL`` is the JSON-schema form handed to a model or parser as a
contract. The pydantic models mirror it for validating a model's output.
"""
import json
from typing import Any, Dict, List, Literal, Optional, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ChartSpecError
from .types import ChartType, Tool
from .utils import create_tool

CHART_TYPES: tuple = get_args(ChartType)

CHART_TOOL: Tool = create_tool(
    name="generate_graph_data",
    description="Generate structured JSON data for creating financial charts and graphs.",
    parameters={
        "chartType": {
            "type": "string",
            "enum": list(CHART_TYPES),
            "description": "The type of chart to generate",
        },
        "config": {
            "type": "object",
            "properties": {
                "title": {"type": "string"},
                "description": {"type": "string"},
                "trend": {
                    "type": "object",
                    "properties": {
                        "percentage": {"type": "number"},
                        "direction": {"type": "string", "enum": ["up", "down"]},
                    },
                    "required": ["percentage", "direction"],
                },
                "footer": {"type": "string"},
                "totalLabel": {"type": "string"},
                "xAxisKey": {"type": "string"},
            },
            "required": ["title", "description"],
        },
        # Rows are unconstrained so every chart type can use its own keys
        "data": {
            "type": "array",
            "items": {"type": "object", "additionalProperties": True},
        },
        "chartConfig": {
            "type": "object",
            "additionalProperties": {
                "type": "object",
                "properties": {
                    "label": {"type": "string"},
                    "stacked": {"type": "boolean"},
                },
                "required": ["label"],
            },
        },
    },
    required=["chartType", "config", "data", "chartConfig"],
)


class ChartTrend(BaseModel):
    percentage: float
    direction: Literal["up", "down"]


class ChartConfig(BaseModel):
    title: str
    description: str
    trend: Optional[ChartTrend] = None
    footer: Optional[str] = None
    totalLabel: Optional[str] = None
    xAxisKey: Optional[str] = None


class SeriesConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    label: str
    stacked: Optional[bool] = None


class ChartSpec(BaseModel):
    """
    Chart specification produced by a model and consumed by the chat UI.

    Numeric content of ``data`` is never interpreted here.
    """
    chartType: ChartType
    config: ChartConfig
    data: List[Dict[str, Any]] = Field(default_factory=list)
    chartConfig: Dict[str, SeriesConfig]


def validate_chart_type(value: str) -> str:
    """
    Return ``value`` if it names one of the supported chart kinds.

    Raises:
        ChartSpecError: For any other value.
    """
    if value not in CHART_TYPES:
        raise ChartSpecError(
            f"Unsupported chart type: {value}. Use one of: {', '.join(CHART_TYPES)}"
        )
    return value


def parse_chart_spec(payload: Union[str, Dict[str, Any]]) -> ChartSpec:
    """
    Validate a chart specification given as a dict or a JSON string.

    Raises:
        ChartSpecError: If the payload is not JSON or does not match the schema.
    """
    try:
        if isinstance(payload, str):
            return ChartSpec.model_validate(json.loads(payload))
        return ChartSpec.model_validate(payload)
    except (json.JSONDecodeError, ValidationError) as e:
        raise ChartSpecError(f"Invalid chart specification: {e}") from e
