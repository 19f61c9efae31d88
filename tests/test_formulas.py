from __future__ import annotations

from copy import deepcopy

import numpy as np
import pytest

from codcalc.formulas import (
    calculate_metrics,
    fixed_costs_for_duration,
    format_currency,
    format_percent,
    funnel_counts,
    one_time_costs_total,
    planned_ad_spend,
    safe_div,
)
from codcalc.model import daily_ad_spend


def test_snapshot_matches_reference_scenario(base_inputs):
    m = calculate_metrics(base_inputs)

    assert m["total_leads"] == 333
    assert m["total_orders"] == 167
    assert m["delivered_orders"] == 117
    assert m["rto_orders"] == 50
    assert m["revenue"] == pytest.approx(46800.0)
    assert m["total_cogs"] == pytest.approx(16700.0)
    assert m["total_shipping"] == pytest.approx(3510.0)
    assert m["total_misc"] == pytest.approx(1670.0)
    assert m["total_ads"] == pytest.approx(5000.0)
    assert m["net_profit"] == pytest.approx(19920.0)


def test_zero_guards_when_cost_per_lead_is_zero(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["cost_per_lead"] = 0.0
    m = calculate_metrics(inputs)

    assert m["total_leads"] == 0
    assert m["revenue"] == 0.0
    assert m["net_margin"] == 0.0
    assert m["cost_per_purchase"] == 0.0
    assert m["average_order_value"] == 0.0
    assert m["break_even_roas"] == 0.0
    assert m["roas"] == 0.0


def test_zero_guards_when_nothing_is_spent(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["ad_spend_input"] = 0.0
    m = calculate_metrics(inputs)

    assert m["total_ads"] == 0.0
    assert m["roas"] == 0.0
    assert m["roi"] == 0.0


def test_break_even_roas_is_zero_when_margin_is_already_consumed(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["product_cost"] = 1000.0
    m = calculate_metrics(inputs)

    assert m["revenue"] > 0
    assert m["break_even_roas"] == 0.0


def test_break_even_roas_matches_definition(base_inputs):
    m = calculate_metrics(base_inputs)
    break_even_spend = m["revenue"] - (m["total_cogs"] + m["total_shipping"] + m["total_misc"])
    assert m["break_even_roas"] == pytest.approx(m["revenue"] / break_even_spend)


def test_product_cost_is_lost_on_returns(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["delivered_percentage"] = 0.0
    m = calculate_metrics(inputs)

    assert m["delivered_orders"] == 0
    assert m["total_cogs"] == pytest.approx(m["total_orders"] * inputs["product_cost"])
    assert m["total_cogs"] == pytest.approx(calculate_metrics(base_inputs)["total_cogs"])


def test_funnel_counts_round_half_up_at_every_split():
    counts = funnel_counts(45.0, 15.0, 50.0, 50.0, 50.0)

    assert float(counts["leads"]) == 3
    assert float(counts["orders"]) == 2
    assert float(counts["delivered"]) == 1
    assert float(counts["rto"]) == 1
    assert float(counts["upsell_orders"]) == 1
    assert float(counts["delivered_upsell"]) == 1


def test_funnel_counts_never_deliver_more_than_ordered():
    spend = np.arange(0, 3000, 7.5)
    counts = funnel_counts(spend, 15.0, 67.0, 100.0, 100.0)

    assert np.all(counts["delivered"] <= counts["orders"])
    assert np.all(counts["rto"] >= 0)
    assert np.all(counts["upsell_orders"] <= counts["orders"])
    assert np.all(counts["delivered_upsell"] <= counts["upsell_orders"])


def test_planned_ad_spend_applies_schedule_inside_window(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs.update(
        {
            "ad_spend_input": 1000.0,
            "budget_duration": 10,
            "ad_schedule": [
                {"id": "a", "day": 6, "type": "increase_daily", "amount": 50.0},
                {"id": "b", "day": 3, "type": "one_time_injection", "amount": 200.0},
                {"id": "c", "day": 11, "type": "one_time_injection", "amount": 999.0},
            ],
        }
    )

    assert planned_ad_spend(inputs) == pytest.approx(1450.0)
    assert daily_ad_spend(inputs, 10).sum() == pytest.approx(planned_ad_spend(inputs))


def test_fixed_costs_are_prorated_by_thirty_day_month():
    costs = [{"description": "Rent", "amount": 240.0}, {"description": "Tools", "amount": 60.0}]
    assert fixed_costs_for_duration(costs, 10) == pytest.approx(100.0)
    assert fixed_costs_for_duration(costs, 0) == pytest.approx(10.0)


def test_one_time_costs_are_not_prorated():
    costs = [{"day": 3, "amount": 120.0}, {"day": 400, "amount": 80.0}]
    assert one_time_costs_total(costs) == pytest.approx(200.0)


def test_safe_div_returns_zero_for_non_positive_divisor():
    assert safe_div(10.0, 0.0) == 0.0
    assert safe_div(10.0, -2.0) == 0.0
    assert safe_div(10.0, 4.0) == 2.5


def test_currency_and_percent_formatting():
    assert format_currency(1234.5, "$") == "$1,234.5"
    assert format_currency(1000, "MAD ") == "MAD 1,000"
    assert format_currency(0.456, "€") == "€0.46"
    assert format_currency(-12.5, "£") == "-£12.5"
    assert format_percent(12.345) == "12.3%"
