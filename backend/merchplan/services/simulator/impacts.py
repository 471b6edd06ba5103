"""
Merchandise Planning - Impact Recording & Consolidation

Raw impacts are captured once per (parameter, metric) pair while the
parameters are propagated. Consolidation then collapses them to a single
impact per metric, ordered by size of movement.
"""

from merchplan.models.simulator import (
    ImpactDirection,
    MetricName,
    ScenarioImpact,
    Significance,
    SimulatorConfig,
)


def _direction(value: float) -> ImpactDirection:
    return ImpactDirection.POSITIVE if value >= 0 else ImpactDirection.NEGATIVE


def record_impact(
    metric: MetricName,
    base_value: float,
    previous_value: float,
    projected_value: float,
    impact: float,
    config: SimulatorConfig,
) -> ScenarioImpact:
    """
    Capture one raw impact.

    change is measured against the untouched baseline, so a metric moved by
    several parameters carries the running total on each later record.
    Significance compares the step's own impact with the value it was
    applied to.
    """
    change = projected_value - base_value
    magnitude = abs(impact)

    if magnitude > previous_value * config.significance_high_ratio:
        significance = Significance.HIGH
    elif magnitude > previous_value * config.significance_medium_ratio:
        significance = Significance.MEDIUM
    else:
        significance = Significance.LOW

    return ScenarioImpact(
        metric=metric,
        label=metric.label,
        base_value=base_value,
        projected_value=projected_value,
        change=change,
        change_percent=change / base_value * 100,
        significance=significance,
        direction=_direction(impact),
    )


def _merge(metric: MetricName, impacts: list[ScenarioImpact], config: SimulatorConfig) -> ScenarioImpact:
    base_value = impacts[0].base_value
    total_change = sum(i.change for i in impacts)
    change_percent = total_change / base_value * 100

    if abs(change_percent) > config.consolidated_high_pct:
        significance = Significance.HIGH
    elif abs(change_percent) > config.consolidated_medium_pct:
        significance = Significance.MEDIUM
    else:
        significance = Significance.LOW

    return ScenarioImpact(
        metric=metric,
        label=metric.label,
        base_value=base_value,
        projected_value=base_value + total_change,
        change=total_change,
        change_percent=change_percent,
        significance=significance,
        direction=_direction(total_change),
    )


def consolidate_impacts(
    impacts: list[ScenarioImpact],
    config: SimulatorConfig,
) -> list[ScenarioImpact]:
    """
    Merge raw impacts that share a metric.

    A metric touched once passes through unchanged. The result is sorted by
    descending |change_percent|; ties keep first-seen metric order.
    """
    by_metric: dict[MetricName, list[ScenarioImpact]] = {}
    for impact in impacts:
        by_metric.setdefault(impact.metric, []).append(impact)

    consolidated = [
        group[0] if len(group) == 1 else _merge(metric, group, config)
        for metric, group in by_metric.items()
    ]

    return sorted(consolidated, key=lambda i: abs(i.change_percent), reverse=True)
