"""
Merchandise Planning - Scenario Recommendations & Risks

Rule-based guidance keyed on parameter identity and the sign/size of its
change:

    price_adjustment  > +5%   risk (demand loss) + phased-rollout advice
                      < -5%   risk (margin compression)
    inventory_level   > +20%  risk (carrying cost, markdowns) + velocity advice
                      < -20%  risk (stockouts)
    markdown_timing   < 0     risk (full-price sales) + slow-mover advice

Any other parameter, or a change inside the thresholds, produces nothing.
"""

from dataclasses import dataclass, field
from typing import Callable, Sequence

from merchplan.models.simulator import ParameterName, ScenarioParameter, SimulatorConfig
from merchplan.services.simulator.propagation import change_percent
from merchplan.services.simulator.sensitivity import SensitivityRegistry

# Share of a price change that shows up as lost demand / compressed margin
DEMAND_ELASTICITY = 0.2
MARGIN_PASS_THROUGH = 0.8


@dataclass
class Advisories:
    """Accumulated guidance for one simulation."""
    recommendations: list[str] = field(default_factory=list)
    risks: list[str] = field(default_factory=list)


def _price_rules(pct: float, config: SimulatorConfig, out: Advisories) -> None:
    if pct > config.price_advisory_pct:
        out.risks.append(
            f"Price increase of {pct:.1f}% may reduce demand by "
            f"{abs(pct * DEMAND_ELASTICITY):.1f}%"
        )
        out.recommendations.append("Consider phased price increases to minimize customer impact")
    elif pct < -config.price_advisory_pct:
        out.risks.append(
            f"Price reduction will compress margins by approximately "
            f"{abs(pct * MARGIN_PASS_THROUGH):.1f}%"
        )


def _inventory_rules(pct: float, config: SimulatorConfig, out: Advisories) -> None:
    if pct > config.inventory_advisory_pct:
        out.risks.append(
            "Significant inventory increase may lead to higher carrying costs and markdown risk"
        )
        out.recommendations.append("Ensure sufficient sell-through velocity before increasing buy")
    elif pct < -config.inventory_advisory_pct:
        out.risks.append("Inventory reduction increases stockout risk during peak demand")


def _markdown_rules(pct: float, config: SimulatorConfig, out: Advisories) -> None:
    if pct < 0:
        out.risks.append("Earlier markdowns will accelerate sell-through but reduce full-price sales")
        out.recommendations.append(
            "Target slow-moving SKUs for early markdown to preserve margin on top sellers"
        )


_RULES: dict[str, Callable[[float, SimulatorConfig, Advisories], None]] = {
    ParameterName.PRICE_ADJUSTMENT.value: _price_rules,
    ParameterName.INVENTORY_LEVEL.value: _inventory_rules,
    ParameterName.MARKDOWN_TIMING.value: _markdown_rules,
}


def generate_advisories(
    parameters: Sequence[ScenarioParameter],
    registry: SensitivityRegistry,
    config: SimulatorConfig,
) -> Advisories:
    """
    Build recommendations and risks in parameter order.

    Only parameters with a sensitivity profile are considered.
    """
    out = Advisories()
    for parameter in parameters:
        rule = _RULES.get(parameter.name)
        if rule is None or parameter.name not in registry:
            continue
        rule(change_percent(parameter), config, out)
    return out
