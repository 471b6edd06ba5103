"""
Merchandise Planning - Scenario Score & Confidence

Score (0-100):
    Weighted average of per-metric scores. 50 means "no change".
        metric score = 50 + improvement * 100
        lower-is-better metrics (stock-out rate): 50 + improvement * 50
    Each metric score is clamped to 0-100 before weighting. Metrics with a
    zero baseline are left out of both the sum and the weight.

Confidence (50-95):
    Starts at 95 and drops with the size and number of parameter changes.
"""

from typing import Sequence

from merchplan.core.types import clamp
from merchplan.models.simulator import MetricSet, ScenarioParameter, SimulatorConfig
from merchplan.services.simulator.propagation import change_percent


def calculate_score(
    baseline: MetricSet,
    projected: MetricSet,
    config: SimulatorConfig,
) -> float:
    """Composite 0-100 score of the projected metrics against baseline."""
    weighted_score = 0.0
    total_weight = 0.0

    for metric, weight in config.score_weights:
        base_value = baseline.value(metric)
        projected_value = projected.value(metric)

        if base_value == 0:
            continue

        if metric in config.lower_is_better:
            improvement = (base_value - projected_value) / base_value
            metric_score = config.neutral_score + improvement * config.lower_is_better_scale
        else:
            improvement = (projected_value - base_value) / base_value
            metric_score = config.neutral_score + improvement * config.improvement_scale

        weighted_score += clamp(metric_score, 0, 100) * weight
        total_weight += weight

    if total_weight > 0:
        return clamp(weighted_score / total_weight, 0, 100)
    return config.neutral_score


def calculate_confidence(
    parameters: Sequence[ScenarioParameter],
    config: SimulatorConfig,
) -> int:
    """Confidence percentage for a parameter set."""
    confidence = config.base_confidence

    for parameter in parameters:
        magnitude = abs(change_percent(parameter))
        for threshold, penalty in config.confidence_tiers:
            if magnitude > threshold:
                confidence -= penalty
                break

    # Many simultaneous changes compound uncertainty
    if len(parameters) > config.free_parameter_count:
        confidence -= (len(parameters) - config.free_parameter_count) * config.extra_parameter_penalty

    return int(clamp(confidence, config.min_confidence, config.max_confidence))
