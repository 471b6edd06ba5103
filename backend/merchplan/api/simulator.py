"""
Merchandise Planning - What-If Simulator API Routes
Scenario simulation endpoints for the planning dashboard

GUARDRAILS:
- Simulation outputs are ADVISORY ONLY
- Nothing is persisted; saving scenarios is the dashboard's concern
"""

from typing import Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from merchplan.models.simulator import (
    MetricSet,
    ScenarioComparison,
    ScenarioParameter,
    ScenarioPreset,
    SensitivityProfile,
    SimulationResult,
    SimulatorConfig,
)
from merchplan.services.simulator import InvalidParameterError, whatif_simulator

router = APIRouter(prefix="/simulator", tags=["What-If Simulator"])


class SimulationRequest(BaseModel):
    """Body for POST /simulator/simulate."""
    parameters: list[ScenarioParameter] = Field(default_factory=list)
    baseline: Optional[MetricSet] = None


class PresetSimulationRequest(BaseModel):
    """Body for POST /simulator/presets/{name}/simulate."""
    baseline: Optional[MetricSet] = None


class ComparisonRequest(BaseModel):
    """Body for POST /simulator/compare."""
    result_1: SimulationResult
    result_2: SimulationResult


# =============================================================================
# SIMULATION
# =============================================================================

@router.post("/simulate", response_model=SimulationResult)
async def simulate(request: SimulationRequest) -> SimulationResult:
    """
    Run a what-if simulation.

    ADVISORY ONLY: No actions are taken.

    Parameters are applied in the order given; order changes the result.
    """
    if not request.parameters:
        raise HTTPException(status_code=400, detail="At least one parameter is required")

    try:
        return whatif_simulator.run_simulation(request.parameters, request.baseline)
    except InvalidParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/compare", response_model=ScenarioComparison)
async def compare(request: ComparisonRequest) -> ScenarioComparison:
    """
    Compare two simulation results.

    A score difference under 2 points is a tie.
    """
    return whatif_simulator.compare_scenarios(request.result_1, request.result_2)


# =============================================================================
# PRESETS
# =============================================================================

@router.get("/presets", response_model=list[ScenarioPreset])
async def get_presets() -> list[ScenarioPreset]:
    """Get the scenario preset library."""
    return whatif_simulator.get_scenario_presets()


@router.post("/presets/{name}/simulate", response_model=SimulationResult)
async def simulate_preset(
    name: str,
    request: Optional[PresetSimulationRequest] = None,
) -> SimulationResult:
    """Run a named preset against the given (or default) baseline."""
    baseline = request.baseline if request else None
    try:
        result = whatif_simulator.run_preset(name, baseline)
    except InvalidParameterError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if result is None:
        raise HTTPException(status_code=404, detail="Preset not found")
    return result


# =============================================================================
# CONFIGURATION
# =============================================================================

@router.get("/sensitivity", response_model=dict[str, SensitivityProfile])
async def get_sensitivity() -> dict[str, SensitivityProfile]:
    """Get the active parameter sensitivity table."""
    return whatif_simulator.get_sensitivity().as_dict()


@router.get("/config", response_model=SimulatorConfig)
async def get_config() -> SimulatorConfig:
    """Get simulator configuration."""
    return whatif_simulator.get_config()
