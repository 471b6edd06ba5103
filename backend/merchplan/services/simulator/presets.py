"""
Merchandise Planning - Scenario Presets
One-click parameter bundles for common planning stances.
"""

from typing import Optional

from merchplan.models.simulator import ParameterName, ScenarioParameter, ScenarioPreset


def _param(name: ParameterName, label: str, new_value: float, base_value: float = 1.0) -> ScenarioParameter:
    return ScenarioParameter(name=name.value, label=label, base_value=base_value, new_value=new_value)


def get_scenario_presets() -> list[ScenarioPreset]:
    """Preset bundles, built fresh on every call."""
    return [
        ScenarioPreset(
            name="Aggressive Growth",
            description="Maximize revenue through increased inventory and moderate pricing",
            parameters=[
                _param(ParameterName.BUY_QUANTITY, "Buy Quantity", 1.25),
                _param(ParameterName.PRICE_ADJUSTMENT, "Price Level", 0.95),
            ],
        ),
        ScenarioPreset(
            name="Margin Protection",
            description="Maintain margins by optimizing pricing and reducing markdowns",
            parameters=[
                _param(ParameterName.PRICE_ADJUSTMENT, "Price Level", 1.05),
                _param(ParameterName.MARKDOWN_TIMING, "Markdown Timing", 1.15),
            ],
        ),
        ScenarioPreset(
            name="Inventory Optimization",
            description="Reduce weeks of supply while maintaining service levels",
            parameters=[
                _param(ParameterName.INVENTORY_LEVEL, "Inventory Level", 0.85),
                _param(ParameterName.RECEIPT_TIMING, "Receipt Timing", 0.9),
            ],
        ),
        ScenarioPreset(
            name="Conservative",
            description="Risk-averse approach with stable inventory and pricing",
            parameters=[
                _param(ParameterName.INVENTORY_LEVEL, "Inventory Level", 1.1),
                _param(ParameterName.PRICE_ADJUSTMENT, "Price Level", 1.0),
            ],
        ),
    ]


def get_scenario_preset(name: str) -> Optional[ScenarioPreset]:
    """Look up a preset by name (case-insensitive)."""
    wanted = name.strip().lower()
    for preset in get_scenario_presets():
        if preset.name.lower() == wanted:
            return preset
    return None
