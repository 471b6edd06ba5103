"""
Merchandise Planning - What-If Scenario Simulator
Project business metrics under proposed planning changes.

GUARDRAILS:
- Simulation outputs are ADVISORY ONLY
- NEVER modifies the baseline or the parameter list
- Holds no state between calls other than immutable configuration

LOGIC:
1. Validate every parameter (zero base value is the only hard failure)
2. Propagate parameters, in order, over the baseline
3. Consolidate raw impacts per metric
4. Score, estimate confidence, generate recommendations and risks
"""

import logging
from typing import Optional, Sequence

from merchplan.models.simulator import (
    MetricSet,
    Scenario,
    ScenarioComparison,
    ScenarioParameter,
    ScenarioPreset,
    SimulationResult,
    SimulatorConfig,
)
from merchplan.services.simulator import presets
from merchplan.services.simulator.advisories import generate_advisories
from merchplan.services.simulator.comparison import compare_results
from merchplan.services.simulator.impacts import consolidate_impacts
from merchplan.services.simulator.propagation import (
    InvalidParameterError,
    change_percent,
    propagate,
)
from merchplan.services.simulator.scoring import calculate_confidence, calculate_score
from merchplan.services.simulator.sensitivity import SensitivityRegistry, default_registry

logger = logging.getLogger(__name__)


DEFAULT_BASELINE = MetricSet(
    revenue=1_500_000,
    gross_margin=52.3,
    sell_through=68.5,
    inventory_turn=4.2,
    weeks_of_supply=8.5,
    markdown_rate=18.5,
    stock_out_rate=3.2,
    units_sold=45_000,
    avg_selling_price=33.33,
    total_cost=715_500,
)


class WhatIfSimulator:
    """
    Merchandising What-If Scenario Simulator

    Tables (sensitivity profiles, weights, thresholds) are injected so that
    alternate profiles can be simulated without touching engine code.

    IMPORTANT: This is READ-ONLY. All outputs are ADVISORY ONLY.
    """

    def __init__(
        self,
        config: Optional[SimulatorConfig] = None,
        sensitivity: Optional[SensitivityRegistry] = None,
    ) -> None:
        self._config = config if config is not None else SimulatorConfig()
        self._sensitivity = sensitivity if sensitivity is not None else default_registry

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def configure(
        self,
        config: Optional[SimulatorConfig] = None,
        sensitivity: Optional[SensitivityRegistry] = None,
    ) -> None:
        """Swap in a new configuration and/or sensitivity table."""
        if config is not None:
            self._config = config
        if sensitivity is not None:
            self._sensitivity = sensitivity

    def get_config(self) -> SimulatorConfig:
        """Get current configuration."""
        return self._config

    def get_sensitivity(self) -> SensitivityRegistry:
        """Get current sensitivity table."""
        return self._sensitivity

    # =========================================================================
    # SIMULATION
    # =========================================================================

    def _validate(self, parameters: Sequence[ScenarioParameter]) -> None:
        for parameter in parameters:
            try:
                change_percent(parameter)
            except InvalidParameterError as e:
                logger.warning(f"Rejected simulation: {e}")
                raise

    def run_simulation(
        self,
        parameters: Sequence[ScenarioParameter],
        baseline: Optional[MetricSet] = None,
    ) -> SimulationResult:
        """
        Run a what-if simulation.

        Raises InvalidParameterError before any work is done if a parameter
        has a zero base value or a change too large to represent. A
        projection that overflows during propagation raises the same error.
        """
        if baseline is None:
            baseline = DEFAULT_BASELINE
        parameters = list(parameters)
        self._validate(parameters)

        try:
            state = propagate(baseline, parameters, self._sensitivity, self._config)
        except InvalidParameterError as e:
            logger.warning(f"Rejected simulation: {e}")
            raise
        impacts = consolidate_impacts(list(state.impacts), self._config)
        score = calculate_score(baseline, state.metrics, self._config)
        confidence = calculate_confidence(parameters, self._config)
        advisories = generate_advisories(parameters, self._sensitivity, self._config)

        logger.info(
            f"Simulation complete: {len(parameters)} parameters, "
            f"{len(impacts)} impacts, score={score:.1f}, confidence={confidence}"
        )

        return SimulationResult(
            scenario=Scenario(
                parameters=[p.model_copy() for p in parameters],
                baseline=baseline,
                projected=state.metrics,
            ),
            impacts=impacts,
            score=score,
            recommendations=advisories.recommendations,
            risks=advisories.risks,
            confidence_level=confidence,
        )

    def run_preset(
        self,
        name: str,
        baseline: Optional[MetricSet] = None,
    ) -> Optional[SimulationResult]:
        """Run a named preset; None if no preset has that name."""
        preset = presets.get_scenario_preset(name)
        if preset is None:
            return None
        return self.run_simulation(preset.parameters, baseline)

    # =========================================================================
    # COMPARISON
    # =========================================================================

    def compare_scenarios(
        self,
        result_1: SimulationResult,
        result_2: SimulationResult,
    ) -> ScenarioComparison:
        """Compare two simulation results."""
        comparison = compare_results(result_1, result_2, self._config)
        logger.info(
            f"Scenario comparison: winner={comparison.winner}, "
            f"difference={comparison.score_difference:.1f}"
        )
        return comparison

    # =========================================================================
    # PRESETS
    # =========================================================================

    def get_scenario_presets(self) -> list[ScenarioPreset]:
        """Get the preset library."""
        return presets.get_scenario_presets()


# Singleton instance
whatif_simulator = WhatIfSimulator()


def run_simulation(
    parameters: Sequence[ScenarioParameter],
    baseline: Optional[MetricSet] = None,
) -> SimulationResult:
    return whatif_simulator.run_simulation(parameters, baseline)


def compare_scenarios(
    result_1: SimulationResult,
    result_2: SimulationResult,
) -> ScenarioComparison:
    return whatif_simulator.compare_scenarios(result_1, result_2)


def get_scenario_presets() -> list[ScenarioPreset]:
    return whatif_simulator.get_scenario_presets()
