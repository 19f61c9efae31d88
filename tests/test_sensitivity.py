from __future__ import annotations

from copy import deepcopy

import pytest

from codcalc.sensitivity import (
    DEFAULT_SENSITIVITY_DRIVERS,
    TARGET_OPTIONS,
    available_sensitivity_drivers,
    run_one_way_sensitivity,
)


def test_sensitivity_target_options_include_cash_and_break_even_metrics():
    assert "Net Profit" in TARGET_OPTIONS
    assert "Working Capital Required" in TARGET_OPTIONS
    assert "Break-even ROAS" in TARGET_OPTIONS


def test_available_drivers_skip_tables_and_duration(base_inputs):
    drivers = available_sensitivity_drivers(base_inputs)

    assert "selling_price" in drivers
    assert "cost_per_lead" in drivers
    assert "budget_duration" not in drivers
    assert "budget_type" not in drivers
    assert "ad_schedule" not in drivers
    assert "logistics_timeline" not in drivers
    assert drivers == sorted(drivers)


def test_default_sweep_emits_low_and_high_rows_per_driver(base_inputs):
    sens_df = run_one_way_sensitivity(deepcopy(base_inputs), delta_pct=0.1)

    assert len(sens_df) == 2 * len(DEFAULT_SENSITIVITY_DRIVERS)
    assert set(sens_df["Case"]) == {"Low", "High"}
    for target in TARGET_OPTIONS:
        assert target in sens_df.columns
        assert f"Delta {target}" in sens_df.columns


def test_selling_price_delta_matches_delivered_volume(base_inputs):
    sens_df = run_one_way_sensitivity(deepcopy(base_inputs), delta_pct=0.1, drivers=["selling_price"])
    high = sens_df[sens_df["Case"] == "High"].iloc[0]
    low = sens_df[sens_df["Case"] == "Low"].iloc[0]

    # 120 delivered orders, each 40 dearer or cheaper.
    assert high["Driver Value"] == pytest.approx(440.0)
    assert high["Delta Net Profit"] == pytest.approx(4800.0)
    assert low["Delta Net Profit"] == pytest.approx(-4800.0)
    assert high["Delta Working Capital Required"] == pytest.approx(0.0)


def test_percentage_drivers_are_clamped(base_inputs):
    inputs = deepcopy(base_inputs)
    inputs["confirmation_percentage"] = 80.0
    sens_df = run_one_way_sensitivity(inputs, delta_pct=0.5, drivers=["confirmation_percentage"])

    assert sens_df.loc[sens_df["Case"] == "High", "Driver Value"].iloc[0] == 100.0
    assert sens_df.loc[sens_df["Case"] == "Low", "Driver Value"].iloc[0] == pytest.approx(40.0)


def test_non_numeric_drivers_are_skipped(base_inputs):
    sens_df = run_one_way_sensitivity(deepcopy(base_inputs), delta_pct=0.1, drivers=["budget_type", "ad_schedule"])
    assert sens_df.empty
