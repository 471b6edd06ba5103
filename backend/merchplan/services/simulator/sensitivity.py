"""
Merchandise Planning - Parameter Sensitivity Registry
Static table of which metrics each planning lever moves, and how hard.

A multiplier converts a parameter's percentage change into a fractional
effect on a metric:
    price_adjustment +10%, revenue multiplier 0.8  ->  revenue +8%

Negative multipliers are inverse effects (more inventory, fewer stockouts).
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Optional

from merchplan.models.simulator import MetricName, ParameterName, SensitivityProfile


def _profile(effects: Iterable[tuple[MetricName, float]]) -> SensitivityProfile:
    effects = list(effects)
    return SensitivityProfile(
        affects_metrics=tuple(metric for metric, _ in effects),
        multipliers=dict(effects),
    )


DEFAULT_SENSITIVITY_PROFILES: Mapping[str, SensitivityProfile] = MappingProxyType({
    ParameterName.PRICE_ADJUSTMENT.value: _profile([
        (MetricName.REVENUE, 0.8),  # volume loss eats part of the price gain
        (MetricName.GROSS_MARGIN, 0.9),
        (MetricName.SELL_THROUGH, -0.15),
        (MetricName.UNITS_SOLD, -0.2),
    ]),
    ParameterName.MARKDOWN_TIMING.value: _profile([
        (MetricName.GROSS_MARGIN, -0.3),
        (MetricName.SELL_THROUGH, 0.4),
        (MetricName.MARKDOWN_RATE, 0.5),
        (MetricName.INVENTORY_TURN, 0.3),
    ]),
    ParameterName.INVENTORY_LEVEL.value: _profile([
        (MetricName.STOCK_OUT_RATE, -0.8),
        (MetricName.WEEKS_OF_SUPPLY, 1.0),
        (MetricName.INVENTORY_TURN, -0.5),
        (MetricName.MARKDOWN_RATE, 0.3),
    ]),
    ParameterName.RECEIPT_TIMING.value: _profile([
        (MetricName.STOCK_OUT_RATE, -0.4),
        (MetricName.WEEKS_OF_SUPPLY, -0.3),
        (MetricName.SELL_THROUGH, 0.2),
    ]),
    ParameterName.BUY_QUANTITY.value: _profile([
        (MetricName.REVENUE, 0.6),
        (MetricName.UNITS_SOLD, 0.7),
        (MetricName.INVENTORY_TURN, -0.3),
        (MetricName.STOCK_OUT_RATE, -0.5),
        (MetricName.WEEKS_OF_SUPPLY, 0.8),
    ]),
    ParameterName.CATEGORY_MIX.value: _profile([
        (MetricName.GROSS_MARGIN, 0.4),
        (MetricName.AVG_SELLING_PRICE, 0.3),
        (MetricName.SELL_THROUGH, -0.1),
    ]),
})


class SensitivityRegistry:
    """
    Read-only lookup of sensitivity profiles by parameter name.

    Unknown names resolve to None; callers skip them.
    """

    def __init__(self, profiles: Optional[Mapping[str, SensitivityProfile]] = None) -> None:
        source = DEFAULT_SENSITIVITY_PROFILES if profiles is None else profiles
        self._profiles: Mapping[str, SensitivityProfile] = MappingProxyType(dict(source))

    def lookup(self, name: str) -> Optional[SensitivityProfile]:
        return self._profiles.get(name)

    def names(self) -> list[str]:
        """Known parameter names in definition order."""
        return list(self._profiles)

    def as_dict(self) -> dict[str, SensitivityProfile]:
        return dict(self._profiles)

    def __contains__(self, name: object) -> bool:
        return name in self._profiles


default_registry = SensitivityRegistry()
