"""
Merchandise Planning - Metric Propagation

LOGIC:
1. Start from the baseline snapshot
2. For each parameter, in caller order, resolve its sensitivity profile
3. Move every affected metric by current * change% * multiplier
4. Record one raw impact per metric moved

Propagation COMPOUNDS: a later parameter sees metric values already moved
by earlier ones, so parameter order changes the projection. The fold below
keeps that behavior while producing a new MetricSet at every step.
"""

import logging
import math
from dataclasses import dataclass, field
from functools import reduce
from typing import Sequence

from merchplan.models.simulator import (
    MetricName,
    MetricSet,
    ScenarioImpact,
    ScenarioParameter,
    SimulatorConfig,
)
from merchplan.services.simulator.impacts import record_impact
from merchplan.services.simulator.sensitivity import SensitivityRegistry

logger = logging.getLogger(__name__)


class InvalidParameterError(Exception):
    """Raised when a parameter cannot produce a percentage change."""

    def __init__(self, parameter_name: str, message: str) -> None:
        super().__init__(message)
        self.parameter_name = parameter_name


def change_percent(parameter: ScenarioParameter) -> float:
    """Percentage change from base_value to new_value."""
    if parameter.base_value == 0:
        raise InvalidParameterError(
            parameter.name,
            f"Parameter '{parameter.name}' has a base value of 0; "
            "percentage change is undefined",
        )
    pct = (parameter.new_value - parameter.base_value) / parameter.base_value * 100
    if not math.isfinite(pct):
        raise InvalidParameterError(
            parameter.name,
            f"Parameter '{parameter.name}' change from {parameter.base_value} "
            f"to {parameter.new_value} is out of range",
        )
    return pct


def _check_projection(
    parameter: ScenarioParameter,
    metric: MetricName,
    projected: float,
    base_value: float,
) -> None:
    # the projection and its percentage of baseline must both stay finite
    in_range = math.isfinite(projected) and (
        base_value == 0 or math.isfinite((projected - base_value) / base_value * 100)
    )
    if not in_range:
        raise InvalidParameterError(
            parameter.name,
            f"Parameter '{parameter.name}' pushes {metric.value} out of range",
        )


@dataclass(frozen=True)
class PropagationState:
    """Running projection carried through the fold."""
    metrics: MetricSet
    impacts: tuple[ScenarioImpact, ...] = field(default_factory=tuple)


def apply_parameter(
    state: PropagationState,
    parameter: ScenarioParameter,
    baseline: MetricSet,
    registry: SensitivityRegistry,
    config: SimulatorConfig,
) -> PropagationState:
    """Apply one parameter to the running projection."""
    profile = registry.lookup(parameter.name)
    if profile is None:
        logger.debug(f"No sensitivity profile for '{parameter.name}', skipping")
        return state

    pct = change_percent(parameter)
    metrics = state.metrics
    impacts = list(state.impacts)

    for metric in profile.affects_metrics:
        current = metrics.value(metric)
        impact = current * (pct / 100) * profile.multiplier(metric)
        projected = current + impact
        base_value = baseline.value(metric)
        _check_projection(parameter, metric, projected, base_value)
        metrics = metrics.with_value(metric, projected)

        if base_value == 0:
            logger.debug(f"Baseline {metric.value} is 0, impact not recorded")
            continue

        impacts.append(record_impact(
            metric=metric,
            base_value=base_value,
            previous_value=current,
            projected_value=projected,
            impact=impact,
            config=config,
        ))

    return PropagationState(metrics=metrics, impacts=tuple(impacts))


def propagate(
    baseline: MetricSet,
    parameters: Sequence[ScenarioParameter],
    registry: SensitivityRegistry,
    config: SimulatorConfig,
) -> PropagationState:
    """Fold every parameter, in order, into a projected metric set."""
    return reduce(
        lambda state, parameter: apply_parameter(state, parameter, baseline, registry, config),
        parameters,
        PropagationState(metrics=baseline),
    )
