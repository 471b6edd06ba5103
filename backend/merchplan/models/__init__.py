from merchplan.models.simulator import (
    ComparisonWinner,
    ImpactDirection,
    MetricName,
    MetricSet,
    ParameterName,
    Scenario,
    ScenarioAdvantages,
    ScenarioComparison,
    ScenarioImpact,
    ScenarioParameter,
    ScenarioPreset,
    SensitivityProfile,
    Significance,
    SimulationResult,
    SimulatorConfig,
)

__all__ = [
    "ComparisonWinner",
    "ImpactDirection",
    "MetricName",
    "MetricSet",
    "ParameterName",
    "Scenario",
    "ScenarioAdvantages",
    "ScenarioComparison",
    "ScenarioImpact",
    "ScenarioParameter",
    "ScenarioPreset",
    "SensitivityProfile",
    "Significance",
    "SimulationResult",
    "SimulatorConfig",
]
