"""One-way sensitivity analysis helpers."""

from __future__ import annotations

from copy import deepcopy

import pandas as pd

from codcalc.metrics import Results, compute_results
from codcalc.schema import PERCENT_KEYS


DEFAULT_SENSITIVITY_DRIVERS = [
    "selling_price",
    "product_cost",
    "cost_per_lead",
    "confirmation_percentage",
    "delivered_percentage",
    "shipping_forward",
    "ad_spend_input",
]


TARGET_OPTIONS = [
    "Net Profit",
    "Revenue",
    "ROAS",
    "Net Margin %",
    "ROI %",
    "Working Capital Required",
    "Break-even ROAS",
]


def available_sensitivity_drivers(inputs: dict) -> list[str]:
    drivers = []
    blocked = {"budget_duration"}
    for k, v in inputs.items():
        if k in blocked:
            continue
        if isinstance(v, bool):
            continue
        if isinstance(v, (list, dict)):
            continue
        if isinstance(v, (int, float)):
            drivers.append(k)
    return sorted(drivers)


def evaluate_outputs(results: Results) -> dict:
    return {
        "Net Profit": float(results.net_profit),
        "Revenue": float(results.revenue),
        "ROAS": float(results.roas),
        "Net Margin %": float(results.net_margin),
        "ROI %": float(results.roi),
        "Working Capital Required": float(results.cashflow.working_capital_required),
        "Break-even ROAS": float(results.break_even_roas),
    }


def run_one_way_sensitivity(base_inputs: dict, delta_pct: float, drivers: list[str] | None = None) -> pd.DataFrame:
    """Flex each driver down and up by ``delta_pct`` (0.1 = 10%) and rerun the engine."""
    base = evaluate_outputs(compute_results(base_inputs))

    if drivers is None or len(drivers) == 0:
        drivers = [d for d in DEFAULT_SENSITIVITY_DRIVERS if d in base_inputs]

    rows = []
    for driver in drivers:
        if driver not in base_inputs or isinstance(base_inputs[driver], bool):
            continue
        if not isinstance(base_inputs[driver], (int, float)):
            continue
        for case, mult in [("Low", 1 - delta_pct), ("High", 1 + delta_pct)]:
            scenario = deepcopy(base_inputs)
            scenario[driver] = float(scenario[driver]) * mult
            if driver in PERCENT_KEYS:
                scenario[driver] = min(max(scenario[driver], 0.0), 100.0)
            out = evaluate_outputs(compute_results(scenario))
            rows.append(
                {
                    "Driver": driver,
                    "Case": case,
                    "Driver Value": scenario[driver],
                    **{k: out[k] for k in base.keys()},
                    **{f"Delta {k}": out[k] - base[k] for k in base.keys()},
                }
            )

    return pd.DataFrame(rows)
