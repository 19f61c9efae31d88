from __future__ import annotations

from copy import deepcopy

from codcalc.input_metadata import advisory_warnings, calculation_logic_detail, help_with_guidance, impact_detail


def test_help_with_guidance_includes_calculation_and_impact_details():
    help_text = help_with_guidance("cost_per_lead", "Average ad cost to acquire one lead.")
    assert help_text.startswith("Average ad cost to acquire one lead.")
    assert "Reasonable range: 2 to 60." in help_text
    assert "Calculation use:" in help_text
    assert "Impact:" in help_text


def test_help_without_range_still_explains_usage():
    help_text = help_with_guidance("upsell_selling_price", "Price of the add-on item.")
    assert "Reasonable range:" not in help_text
    assert "Calculation use:" in help_text


def test_calculation_and_impact_detail_fallback_patterns():
    calc = calculation_logic_detail("custom_return_rate")
    impact = impact_detail("custom_return_rate")
    assert calc
    assert impact
    assert impact_detail("packaging_cost") == "Higher values lower net profit."


def test_defaults_raise_no_advisories(base_inputs):
    assert advisory_warnings(base_inputs) == []


def test_out_of_range_inputs_raise_advisories(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["cost_per_lead"] = 100.0
    inputs["logistics_timeline"] = {"dispatch_delay": 1, "delivery_time": 3, "payout_delay": 30}
    warnings = advisory_warnings(inputs)

    assert "cost_per_lead=100.000 is outside the recommended range [2, 60]." in warnings
    assert any(w.startswith("payout_delay=30.000") for w in warnings)


def test_negative_delivered_margin_is_flagged(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["selling_price"] = 120.0
    warnings = advisory_warnings(inputs)

    assert any(w.startswith("Delivered unit margin before ads is -20.00") for w in warnings)
