"""
Merchandise Planning - What-If Scenario Simulator Schemas
Data contracts for projecting business metrics under parameter changes

GUARDRAILS:
- Simulation outputs are ADVISORY ONLY
- Baseline metrics are NEVER modified; projections are new records
- Every record is created fresh per call
"""

import re
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Optional

from pydantic import (
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
)

from merchplan.core.types import ChangePercent, ConfidenceLevel, MetricValue, Score


class MetricName(str, Enum):
    """Business metrics tracked by the simulator."""
    REVENUE = "revenue"
    GROSS_MARGIN = "gross_margin"
    SELL_THROUGH = "sell_through"
    INVENTORY_TURN = "inventory_turn"
    WEEKS_OF_SUPPLY = "weeks_of_supply"
    MARKDOWN_RATE = "markdown_rate"
    STOCK_OUT_RATE = "stock_out_rate"
    UNITS_SOLD = "units_sold"
    AVG_SELLING_PRICE = "avg_selling_price"
    TOTAL_COST = "total_cost"

    @property
    def label(self) -> str:
        """Display label, e.g. gross_margin -> Gross Margin."""
        return " ".join(word.capitalize() for word in self.value.split("_"))


class ParameterName(str, Enum):
    """Built-in planning levers."""
    PRICE_ADJUSTMENT = "price_adjustment"
    MARKDOWN_TIMING = "markdown_timing"
    INVENTORY_LEVEL = "inventory_level"
    RECEIPT_TIMING = "receipt_timing"
    BUY_QUANTITY = "buy_quantity"
    CATEGORY_MIX = "category_mix"


class Significance(str, Enum):
    """How much a single metric moved."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ImpactDirection(str, Enum):
    """Sign of a metric movement."""
    POSITIVE = "positive"
    NEGATIVE = "negative"


# =============================================================================
# METRIC SNAPSHOT
# =============================================================================

class MetricSet(BaseModel):
    """
    Point-in-time business metrics.

    Immutable: projections are produced with with_value(), which returns a
    new, re-validated snapshot and leaves this one untouched.
    """
    model_config = ConfigDict(frozen=True)

    revenue: MetricValue
    gross_margin: MetricValue  # percent
    sell_through: MetricValue  # percent
    inventory_turn: MetricValue
    weeks_of_supply: MetricValue
    markdown_rate: MetricValue  # percent
    stock_out_rate: MetricValue  # percent, lower is better
    units_sold: MetricValue
    avg_selling_price: MetricValue
    total_cost: MetricValue

    def value(self, metric: MetricName) -> float:
        """Read a single metric."""
        return getattr(self, metric.value)

    def with_value(self, metric: MetricName, value: float) -> "MetricSet":
        """Return a copy with one metric replaced."""
        return MetricSet.model_validate({**self.model_dump(), metric.value: value})


# =============================================================================
# SCENARIO INPUT MODELS
# =============================================================================

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


class ScenarioParameter(BaseModel):
    """
    A proposed change to one planning lever.

    change % = (new_value - base_value) / base_value * 100
    base_value must be non-zero; the simulator rejects zero at run time.
    """
    name: str  # sensitivity profile key, e.g. price_adjustment
    label: str = ""
    base_value: MetricValue
    new_value: MetricValue

    # Dashboard slider hints (not used in calculations)
    unit: Optional[str] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    step: Optional[float] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        """Accept dashboard camelCase names (priceAdjustment)."""
        return _CAMEL_BOUNDARY.sub("_", v.strip()).lower()


def _freeze_pairs(v: Any) -> Any:
    """Accept a mapping; store it as read-only (metric, value) pairs."""
    if isinstance(v, Mapping):
        return tuple(v.items())
    return v


def _pairs_to_dict(pairs: tuple[tuple[MetricName, float], ...]) -> dict[str, float]:
    return {metric.value: value for metric, value in pairs}


# Read-only per-metric numbers; serialized as a {metric: value} object
MetricWeights = Annotated[
    tuple[tuple[MetricName, float], ...],
    BeforeValidator(_freeze_pairs),
    PlainSerializer(_pairs_to_dict, return_type=dict[str, float]),
]


class SensitivityProfile(BaseModel):
    """
    How one parameter moves the metrics it affects.

    Multipliers are signed: a negative multiplier is an inverse effect.
    """
    model_config = ConfigDict(frozen=True)

    affects_metrics: tuple[MetricName, ...]
    multipliers: MetricWeights = ()

    def multiplier(self, metric: MetricName) -> float:
        for name, value in self.multipliers:
            if name == metric:
                return value
        return 0.0


# =============================================================================
# IMPACTS
# =============================================================================

class ScenarioImpact(BaseModel):
    """Projected movement of one metric."""
    metric: MetricName
    label: str
    base_value: MetricValue
    projected_value: MetricValue
    change: MetricValue
    change_percent: ChangePercent
    significance: Significance
    direction: ImpactDirection


# =============================================================================
# SIMULATION RESULT
# =============================================================================

class Scenario(BaseModel):
    """Inputs and projected state of one simulation."""
    parameters: list[ScenarioParameter] = Field(default_factory=list)
    baseline: MetricSet
    projected: MetricSet


class SimulationResult(BaseModel):
    """
    Complete simulation result.

    IMPORTANT: This is ADVISORY ONLY.
    """
    scenario: Scenario

    # Sorted by descending |change_percent|
    impacts: list[ScenarioImpact] = Field(default_factory=list)

    score: Score
    recommendations: list[str] = Field(default_factory=list)
    risks: list[str] = Field(default_factory=list)
    confidence_level: ConfidenceLevel


class ScenarioAdvantages(BaseModel):
    """Metrics on which each scenario strictly wins."""
    scenario_1: list[str] = Field(default_factory=list)
    scenario_2: list[str] = Field(default_factory=list)


ComparisonWinner = Literal[1, 2, "tie"]


class ScenarioComparison(BaseModel):
    """Head-to-head comparison of two simulation results."""
    winner: ComparisonWinner
    score_difference: float
    advantages: ScenarioAdvantages = Field(default_factory=ScenarioAdvantages)


class ScenarioPreset(BaseModel):
    """A named bundle of parameter changes."""
    name: str
    description: str
    parameters: list[ScenarioParameter] = Field(default_factory=list)


# =============================================================================
# SIMULATION CONFIG
# =============================================================================

class SimulatorConfig(BaseModel):
    """Configuration for the what-if simulator."""
    model_config = ConfigDict(frozen=True)

    # Raw impact significance (fraction of the pre-change metric value)
    significance_high_ratio: float = 0.05
    significance_medium_ratio: float = 0.02

    # Consolidated impact significance (percent of baseline)
    consolidated_high_pct: float = 10.0
    consolidated_medium_pct: float = 5.0

    # Scoring
    score_weights: MetricWeights = (
        (MetricName.REVENUE, 0.25),
        (MetricName.GROSS_MARGIN, 0.25),
        (MetricName.SELL_THROUGH, 0.20),
        (MetricName.STOCK_OUT_RATE, 0.15),
        (MetricName.INVENTORY_TURN, 0.15),
    )
    lower_is_better: frozenset[MetricName] = frozenset({MetricName.STOCK_OUT_RATE})
    improvement_scale: float = 100.0
    lower_is_better_scale: float = 50.0
    neutral_score: float = 50.0

    # Confidence
    base_confidence: int = 95
    min_confidence: int = 50
    max_confidence: int = 95
    # (|change %| above, penalty) - largest first, first match applies
    confidence_tiers: tuple[tuple[float, int], ...] = ((30.0, 15), (20.0, 10), (10.0, 5))
    free_parameter_count: int = 3
    extra_parameter_penalty: int = 3

    # Advisory thresholds (|change %|)
    price_advisory_pct: float = 5.0
    inventory_advisory_pct: float = 20.0

    # Comparison
    tie_threshold: float = 2.0
