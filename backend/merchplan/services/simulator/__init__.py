# What-If Scenario Simulator
from merchplan.services.simulator.engine import (
    DEFAULT_BASELINE,
    WhatIfSimulator,
    compare_scenarios,
    get_scenario_presets,
    run_simulation,
    whatif_simulator,
)
from merchplan.models.simulator import ParameterName
from merchplan.services.simulator.propagation import InvalidParameterError
from merchplan.services.simulator.sensitivity import (
    DEFAULT_SENSITIVITY_PROFILES,
    SensitivityRegistry,
)

__all__ = [
    "DEFAULT_BASELINE",
    "DEFAULT_SENSITIVITY_PROFILES",
    "InvalidParameterError",
    "ParameterName",
    "SensitivityRegistry",
    "WhatIfSimulator",
    "compare_scenarios",
    "get_scenario_presets",
    "run_simulation",
    "whatif_simulator",
]
