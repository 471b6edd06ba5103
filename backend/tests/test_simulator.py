"""
Merchandise Planning - What-If Simulator Tests

For every pipeline stage:
- Happy path against the default baseline
- Compounding / ordering behavior
- Graceful skips (unknown parameters, zero-baseline metrics)
- Hard failure on zero base value
"""

import pytest
from pydantic import ValidationError

from merchplan.models.simulator import (
    ImpactDirection,
    MetricName,
    MetricSet,
    ParameterName,
    ScenarioParameter,
    SensitivityProfile,
    Significance,
    SimulatorConfig,
)
from merchplan.services.simulator import (
    DEFAULT_BASELINE,
    InvalidParameterError,
    SensitivityRegistry,
    WhatIfSimulator,
    run_simulation,
)
from merchplan.services.simulator.impacts import consolidate_impacts, record_impact
from merchplan.services.simulator.propagation import propagate
from merchplan.services.simulator.scoring import calculate_confidence, calculate_score
from merchplan.services.simulator.sensitivity import default_registry


def param(name: str, new_value: float, base_value: float = 1.0) -> ScenarioParameter:
    return ScenarioParameter(name=name, label=name, base_value=base_value, new_value=new_value)


def impact_for(result, metric: MetricName):
    return next(i for i in result.impacts if i.metric == metric)


class TestEmptyScenario:
    """Tests for a simulation with no parameters."""

    def test_projection_equals_baseline(self):
        """No parameters must leave every metric untouched."""
        result = run_simulation([])
        assert result.scenario.projected == result.scenario.baseline
        assert result.scenario.baseline == DEFAULT_BASELINE

    def test_neutral_score_and_full_confidence(self):
        """No parameters must score 50 with 95% confidence."""
        result = run_simulation([])
        assert result.impacts == []
        assert result.score == pytest.approx(50.0)
        assert result.confidence_level == 95
        assert result.recommendations == []
        assert result.risks == []


class TestPropagation:
    """Tests for metric propagation."""

    def test_single_price_adjustment(self):
        """+5% price with a 0.8 multiplier must add 60,000 revenue."""
        result = run_simulation([param("price_adjustment", 1.05)])

        revenue = impact_for(result, MetricName.REVENUE)
        assert revenue.base_value == 1_500_000
        assert revenue.projected_value == pytest.approx(1_560_000)
        assert revenue.change == pytest.approx(60_000)
        assert revenue.change_percent == pytest.approx(4.0)
        assert revenue.direction == ImpactDirection.POSITIVE
        assert revenue.significance == Significance.MEDIUM
        assert result.scenario.projected.revenue == pytest.approx(1_560_000)

    def test_inverse_multipliers_move_metrics_down(self):
        """Negative multipliers must produce negative impacts."""
        result = run_simulation([param("price_adjustment", 1.05)])

        units = impact_for(result, MetricName.UNITS_SOLD)
        assert units.projected_value == pytest.approx(44_550)
        assert units.direction == ImpactDirection.NEGATIVE
        assert units.significance == Significance.LOW

        sell_through = impact_for(result, MetricName.SELL_THROUGH)
        assert sell_through.projected_value == pytest.approx(68.5 - 0.51375)

    def test_impacts_sorted_by_magnitude(self):
        """Impacts must be ordered by descending |change_percent|."""
        result = run_simulation([param("price_adjustment", 1.05)])
        assert [i.metric for i in result.impacts] == [
            MetricName.GROSS_MARGIN,
            MetricName.REVENUE,
            MetricName.UNITS_SOLD,
            MetricName.SELL_THROUGH,
        ]

    def test_untouched_metrics_keep_baseline(self):
        """Metrics outside the profile must not move."""
        result = run_simulation([param("price_adjustment", 1.05)])
        projected = result.scenario.projected
        assert projected.weeks_of_supply == DEFAULT_BASELINE.weeks_of_supply
        assert projected.total_cost == DEFAULT_BASELINE.total_cost

    def test_propagation_compounds(self):
        """A later parameter must act on values already moved."""
        params = [param("price_adjustment", 1.1), param("buy_quantity", 1.25)]
        state = propagate(DEFAULT_BASELINE, params, default_registry, SimulatorConfig())

        revenue = [i for i in state.impacts if i.metric == MetricName.REVENUE]
        assert len(revenue) == 2
        assert revenue[0].projected_value == pytest.approx(1_620_000)
        # 1,620,000 * 25% * 0.6, not 1,500,000 * 25% * 0.6
        assert revenue[1].projected_value == pytest.approx(1_863_000)
        assert state.metrics.revenue == pytest.approx(1_863_000)

    def test_order_changes_consolidated_impacts(self):
        """Swapping parameter order must change the consolidated revenue impact."""
        price = param("price_adjustment", 1.1)
        buy = param("buy_quantity", 1.25)

        forward = impact_for(run_simulation([price, buy]), MetricName.REVENUE)
        reverse = impact_for(run_simulation([buy, price]), MetricName.REVENUE)

        # raw changes 120,000 + 363,000 vs 225,000 + 363,000
        assert forward.change == pytest.approx(483_000)
        assert forward.projected_value == pytest.approx(1_983_000)
        assert forward.change_percent == pytest.approx(32.2)
        assert reverse.change == pytest.approx(588_000)
        assert reverse.projected_value == pytest.approx(2_088_000)
        assert reverse.change_percent == pytest.approx(39.2)
        assert forward.projected_value != pytest.approx(reverse.projected_value)

    def test_baseline_is_not_modified(self):
        """Simulation must not mutate its inputs."""
        baseline = DEFAULT_BASELINE.model_copy()
        params = [param("inventory_level", 1.3)]
        run_simulation(params, baseline)

        assert baseline == DEFAULT_BASELINE
        assert params[0].new_value == 1.3
        assert len(params) == 1

    def test_unknown_parameter_is_skipped(self):
        """An unknown parameter must be ignored by propagation."""
        result = run_simulation([param("weather", 2.0)])
        assert result.scenario.projected == DEFAULT_BASELINE
        assert result.impacts == []
        assert result.score == pytest.approx(50.0)

    def test_unknown_parameter_still_lowers_confidence(self):
        """Confidence must count every parameter, known or not."""
        result = run_simulation([param("weather", 2.0)])
        assert result.confidence_level == 80

    def test_camel_case_names_are_normalized(self):
        """Dashboard camelCase names must resolve to profiles."""
        result = run_simulation([param("priceAdjustment", 1.05)])
        assert result.scenario.parameters[0].name == "price_adjustment"
        assert impact_for(result, MetricName.REVENUE).projected_value == pytest.approx(1_560_000)

    def test_zero_baseline_metric_not_recorded(self):
        """A zero-baseline metric must be skipped, not divided by."""
        baseline = DEFAULT_BASELINE.with_value(MetricName.STOCK_OUT_RATE, 0)
        result = run_simulation([param("inventory_level", 1.5)], baseline)

        assert MetricName.STOCK_OUT_RATE not in [i.metric for i in result.impacts]
        assert result.scenario.projected.stock_out_rate == 0
        assert MetricName.WEEKS_OF_SUPPLY in [i.metric for i in result.impacts]


class TestInvalidParameters:
    """Tests for parameters that cannot be simulated."""

    def test_zero_base_value_raises(self):
        """A zero base value must raise InvalidParameterError."""
        with pytest.raises(InvalidParameterError) as exc:
            run_simulation([param("price_adjustment", 1.1, base_value=0)])

        assert exc.value.parameter_name == "price_adjustment"
        assert "price_adjustment" in str(exc.value)

    def test_zero_base_value_raises_before_any_work(self):
        """A bad parameter anywhere in the list must fail the whole call."""
        params = [param("inventory_level", 1.2), param("markdown_timing", 0.9, base_value=0)]
        with pytest.raises(InvalidParameterError) as exc:
            run_simulation(params)
        assert exc.value.parameter_name == "markdown_timing"

    def test_zero_base_value_on_unknown_parameter_raises(self):
        """Unknown names are still validated."""
        with pytest.raises(InvalidParameterError):
            run_simulation([param("weather", 1.0, base_value=0)])

    def test_non_finite_metric_rejected(self):
        """Metric snapshots must reject NaN and infinity."""
        values = DEFAULT_BASELINE.model_dump()
        values["revenue"] = float("nan")
        with pytest.raises(ValidationError):
            MetricSet(**values)

        values["revenue"] = float("inf")
        with pytest.raises(ValidationError):
            MetricSet(**values)

    def test_with_value_rejects_non_finite(self):
        """Projected snapshots must be validated like any other."""
        with pytest.raises(ValidationError):
            DEFAULT_BASELINE.with_value(MetricName.TOTAL_COST, float("nan"))

        with pytest.raises(ValidationError):
            DEFAULT_BASELINE.with_value(MetricName.REVENUE, float("inf"))

    def test_huge_new_value_raises(self):
        """A change too large to represent must raise, not crash."""
        with pytest.raises(InvalidParameterError) as exc:
            run_simulation([param("price_adjustment", 1e308)])

        assert exc.value.parameter_name == "price_adjustment"
        assert "out of range" in str(exc.value)

    def test_overflowing_projection_raises(self):
        """A finite change that overflows a projected metric must raise."""
        # change is 1e305 %, revenue would reach ~1.2e309
        with pytest.raises(InvalidParameterError) as exc:
            run_simulation([param("price_adjustment", 1e293, base_value=1e-10)])

        assert exc.value.parameter_name == "price_adjustment"
        assert "revenue" in str(exc.value)


class TestImpactRecording:
    """Tests for raw impact significance."""

    def test_significance_thresholds(self):
        """Raw significance must compare the step impact with the prior value."""
        config = SimulatorConfig()

        high = record_impact(MetricName.REVENUE, 100, 100, 106, 6, config)
        medium = record_impact(MetricName.REVENUE, 100, 100, 103, 3, config)
        low = record_impact(MetricName.REVENUE, 100, 100, 101, 1, config)

        assert high.significance == Significance.HIGH
        assert medium.significance == Significance.MEDIUM
        assert low.significance == Significance.LOW

    def test_change_is_measured_against_baseline(self):
        """change and change_percent must be relative to the baseline."""
        impact = record_impact(MetricName.REVENUE, 100, 110, 121, 11, SimulatorConfig())
        assert impact.change == pytest.approx(21)
        assert impact.change_percent == pytest.approx(21)
        assert impact.label == "Revenue"

    def test_zero_impact_is_positive(self):
        """A zero impact must count as positive."""
        impact = record_impact(MetricName.GROSS_MARGIN, 50, 50, 50, 0, SimulatorConfig())
        assert impact.direction == ImpactDirection.POSITIVE
        assert impact.label == "Gross Margin"


class TestConsolidation:
    """Tests for impact consolidation."""

    def test_one_impact_per_metric(self):
        """Consolidation must leave at most one impact per metric."""
        params = [
            param("price_adjustment", 1.1),
            param("buy_quantity", 1.25),
            param("category_mix", 1.2),
        ]
        result = run_simulation(params)
        metrics = [i.metric for i in result.impacts]
        assert len(metrics) == len(set(metrics))

    def test_consolidated_change_is_sum_of_raw_changes(self):
        """The merged change must equal the sum of raw changes."""
        config = SimulatorConfig()
        params = [param("price_adjustment", 1.1), param("buy_quantity", 1.25)]
        raw = list(propagate(DEFAULT_BASELINE, params, default_registry, config).impacts)
        merged = consolidate_impacts(raw, config)

        for impact in merged:
            raw_changes = [r.change for r in raw if r.metric == impact.metric]
            assert impact.change == pytest.approx(sum(raw_changes))
            assert impact.projected_value == pytest.approx(impact.base_value + impact.change)

    def test_single_impact_passes_through(self):
        """A metric touched once must be passed through unchanged."""
        config = SimulatorConfig()
        raw = list(propagate(DEFAULT_BASELINE, [param("receipt_timing", 0.9)],
                             default_registry, config).impacts)
        assert consolidate_impacts(raw, config) == sorted(
            raw, key=lambda i: abs(i.change_percent), reverse=True
        )

    def test_consolidated_significance_uses_percent(self):
        """Merged significance must use the 10% / 5% thresholds."""
        result = run_simulation([param("price_adjustment", 1.1), param("buy_quantity", 1.25)])
        revenue = impact_for(result, MetricName.REVENUE)
        assert revenue.significance == Significance.HIGH
        assert revenue.direction == ImpactDirection.POSITIVE


class TestScoring:
    """Tests for the composite scenario score."""

    def test_margin_gain_raises_score(self):
        """Category mix +50% must score 54."""
        result = run_simulation([param("category_mix", 1.5)])
        # gross margin 70, sell-through 45, others 50
        assert result.score == pytest.approx(54.0)

    def test_stock_out_rate_is_inverted(self):
        """Lower stock-out rate must raise its metric score at half scale."""
        result = run_simulation([param("inventory_level", 1.5)])
        # stock-out 70, inventory turn 25, others 50
        assert result.score == pytest.approx(49.25)

    def test_zero_baseline_metric_excluded_from_weight(self):
        """A zero-baseline metric must not contribute weight."""
        config = SimulatorConfig()
        baseline = DEFAULT_BASELINE.with_value(MetricName.REVENUE, 0)
        projected = baseline.with_value(MetricName.GROSS_MARGIN, 52.3 * 1.2)
        # gross margin 70 with weight 0.25 over total weight 0.75
        expected = (70 * 0.25 + 50 * 0.2 + 50 * 0.15 + 50 * 0.15) / 0.75
        assert calculate_score(baseline, projected, config) == pytest.approx(expected)

    def test_no_contributing_metric_scores_neutral(self):
        """If every scored metric has a zero baseline the score is 50."""
        config = SimulatorConfig(score_weights={MetricName.REVENUE: 1.0})
        baseline = DEFAULT_BASELINE.with_value(MetricName.REVENUE, 0)
        assert calculate_score(baseline, baseline, config) == 50.0

    def test_score_is_clamped(self):
        """Score must stay within 0-100 for extreme changes."""
        up = run_simulation([
            param("price_adjustment", 100.0),
            param("buy_quantity", 50.0),
            param("markdown_timing", 40.0),
        ])
        down = run_simulation([
            param("price_adjustment", -100.0),
            param("category_mix", -80.0),
            param("buy_quantity", -60.0),
        ])
        for result in (up, down):
            assert 0 <= result.score <= 100


class TestConfidence:
    """Tests for the confidence estimate."""

    @pytest.mark.parametrize("new_value,expected", [
        (105, 95),
        (115, 90),
        (125, 85),
        (150, 80),
        (50, 80),
    ])
    def test_single_parameter_tiers(self, new_value, expected):
        """Only the largest matching tier must apply."""
        params = [param("price_adjustment", new_value, base_value=100)]
        assert calculate_confidence(params, SimulatorConfig()) == expected

    def test_extra_parameters_compound(self):
        """Each parameter beyond three must cost 3 points."""
        params = [param(name, 1.0) for name in (
            "price_adjustment", "markdown_timing", "inventory_level",
            "receipt_timing", "buy_quantity",
        )]
        assert calculate_confidence(params, SimulatorConfig()) == 89

    def test_confidence_floor(self):
        """Confidence must never drop below 50."""
        params = [param("price_adjustment", 10.0) for _ in range(8)]
        result = run_simulation(params)
        assert result.confidence_level == 50
        assert 0 <= result.score <= 100


class TestAdvisories:
    """Tests for recommendations and risks."""

    def test_price_increase(self):
        """A price increase above 5% must warn about demand."""
        result = run_simulation([param("price_adjustment", 1.1)])
        assert result.risks == ["Price increase of 10.0% may reduce demand by 2.0%"]
        assert result.recommendations == [
            "Consider phased price increases to minimize customer impact"
        ]

    def test_price_reduction(self):
        """A price cut beyond 5% must warn about margins only."""
        result = run_simulation([param("price_adjustment", 0.9)])
        assert result.risks == ["Price reduction will compress margins by approximately 8.0%"]
        assert result.recommendations == []

    def test_inventory_increase(self):
        """An inventory increase above 20% must warn about carrying costs."""
        result = run_simulation([param("inventory_level", 1.25)])
        assert result.risks == [
            "Significant inventory increase may lead to higher carrying costs and markdown risk"
        ]
        assert result.recommendations == [
            "Ensure sufficient sell-through velocity before increasing buy"
        ]

    def test_inventory_reduction(self):
        """An inventory cut beyond 20% must warn about stockouts."""
        result = run_simulation([param("inventory_level", 0.75)])
        assert result.risks == ["Inventory reduction increases stockout risk during peak demand"]
        assert result.recommendations == []

    def test_earlier_markdowns(self):
        """Any negative markdown timing change must produce guidance."""
        result = run_simulation([param("markdown_timing", 0.9)])
        assert result.risks == [
            "Earlier markdowns will accelerate sell-through but reduce full-price sales"
        ]
        assert result.recommendations == [
            "Target slow-moving SKUs for early markdown to preserve margin on top sellers"
        ]

    def test_no_guidance_inside_thresholds(self):
        """Small or unrelated changes must produce nothing."""
        result = run_simulation([
            param("inventory_level", 1.1),
            param("markdown_timing", 1.15),
            param("category_mix", 2.0),
            param("receipt_timing", 0.5),
        ])
        assert result.risks == []
        assert result.recommendations == []

    def test_guidance_follows_parameter_order(self):
        """Risks must be listed in parameter order."""
        result = run_simulation([param("markdown_timing", 0.9), param("inventory_level", 0.75)])
        assert result.risks == [
            "Earlier markdowns will accelerate sell-through but reduce full-price sales",
            "Inventory reduction increases stockout risk during peak demand",
        ]


class TestInjectedConfiguration:
    """Tests for substituting sensitivity tables and thresholds."""

    def test_alternate_sensitivity_profile(self):
        """An injected registry must replace the built-in profiles."""
        registry = SensitivityRegistry({
            "price_adjustment": SensitivityProfile(
                affects_metrics=(MetricName.REVENUE,),
                multipliers={MetricName.REVENUE: 2.0},
            ),
        })
        simulator = WhatIfSimulator(sensitivity=registry)
        result = simulator.run_simulation([param("price_adjustment", 1.5)])

        assert [i.metric for i in result.impacts] == [MetricName.REVENUE]
        assert result.scenario.projected.revenue == pytest.approx(3_000_000)
        assert result.risks == ["Price increase of 50.0% may reduce demand by 10.0%"]

    def test_profile_without_advisory_rule_source(self):
        """Parameters missing from the registry must not produce guidance."""
        simulator = WhatIfSimulator(sensitivity=SensitivityRegistry({}))
        result = simulator.run_simulation([param("price_adjustment", 1.5)])
        assert result.risks == []
        assert result.impacts == []

    def test_missing_multiplier_defaults_to_zero(self):
        """A listed metric without a multiplier must not move."""
        registry = SensitivityRegistry({
            "price_adjustment": SensitivityProfile(affects_metrics=(MetricName.REVENUE,)),
        })
        result = WhatIfSimulator(sensitivity=registry).run_simulation(
            [param("price_adjustment", 1.5)]
        )
        assert result.scenario.projected.revenue == DEFAULT_BASELINE.revenue
        assert result.impacts[0].change == 0

    def test_configure_swaps_config(self):
        """configure() must replace the active configuration."""
        simulator = WhatIfSimulator()
        config = SimulatorConfig(base_confidence=90, max_confidence=90)
        simulator.configure(config=config)

        assert simulator.get_config() is config
        assert simulator.run_simulation([]).confidence_level == 90

    def test_registry_lookup(self):
        """Unknown names must resolve to None."""
        assert default_registry.lookup("weather") is None
        assert default_registry.lookup("price_adjustment") is not None
        assert "price_adjustment" in default_registry
        assert "weather" not in default_registry
        assert set(default_registry.names()) == {p.value for p in ParameterName}

    def test_profile_tables_are_read_only(self):
        """Shared profile multipliers must not be mutable through a lookup."""
        profile = default_registry.lookup("price_adjustment")
        assert profile.multipliers[0] == (MetricName.REVENUE, 0.8)

        with pytest.raises(TypeError):
            profile.multipliers[0] = (MetricName.REVENUE, 5.0)

        assert default_registry.lookup("price_adjustment").multiplier(MetricName.REVENUE) == 0.8

    def test_score_weights_are_read_only(self):
        """Mapping input must be stored as fixed pairs in the config."""
        config = SimulatorConfig(score_weights={MetricName.REVENUE: 1.0})
        assert config.score_weights == ((MetricName.REVENUE, 1.0),)

        with pytest.raises(TypeError):
            config.score_weights[0] = (MetricName.REVENUE, 2.0)
        assert config.model_dump()["score_weights"] == {"revenue": 1.0}
        assert default_registry.names() == [
            "price_adjustment", "markdown_timing", "inventory_level",
            "receipt_timing", "buy_quantity", "category_mix",
        ]
