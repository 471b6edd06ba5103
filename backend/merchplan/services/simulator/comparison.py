"""
Merchandise Planning - Scenario Comparison

winner: "tie" when the scores are within the tie threshold (2 points),
otherwise the scenario with the higher score.

Per-metric advantages cover metrics present in both results. Higher
projected value wins, except for lower-is-better metrics (stock-out rate).
Equal projections are nobody's advantage.
"""

from merchplan.models.simulator import (
    ComparisonWinner,
    ScenarioAdvantages,
    ScenarioComparison,
    ScenarioImpact,
    SimulationResult,
    SimulatorConfig,
)


def _advantage(winner: ScenarioImpact, loser: ScenarioImpact) -> str:
    return (
        f"Better {winner.label}: {winner.change_percent:.1f}% "
        f"vs {loser.change_percent:.1f}%"
    )


def compare_results(
    result_1: SimulationResult,
    result_2: SimulationResult,
    config: SimulatorConfig,
) -> ScenarioComparison:
    """Rank two results and list where each one wins."""
    score_difference = result_1.score - result_2.score

    winner: ComparisonWinner
    if abs(score_difference) < config.tie_threshold:
        winner = "tie"
    elif score_difference > 0:
        winner = 1
    else:
        winner = 2

    advantages = ScenarioAdvantages()
    impacts_2 = {impact.metric: impact for impact in result_2.impacts}

    for impact_1 in result_1.impacts:
        impact_2 = impacts_2.get(impact_1.metric)
        if impact_2 is None or impact_1.projected_value == impact_2.projected_value:
            continue

        if impact_1.metric in config.lower_is_better:
            first_better = impact_1.projected_value < impact_2.projected_value
        else:
            first_better = impact_1.projected_value > impact_2.projected_value

        if first_better:
            advantages.scenario_1.append(_advantage(impact_1, impact_2))
        else:
            advantages.scenario_2.append(_advantage(impact_2, impact_1))

    return ScenarioComparison(
        winner=winner,
        score_difference=score_difference,
        advantages=advantages,
    )
