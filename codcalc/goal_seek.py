"""Goal inversion: volume needed for a target profit, closed form and engine-calibrated."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable

from codcalc.defaults import DEFAULTS
from codcalc.formulas import (
    campaign_days,
    fixed_costs_for_duration,
    one_time_costs_total,
    planned_ad_spend,
    safe_div,
)
from codcalc.metrics import compute_results


@dataclass
class GoalSeekResult:
    status: str
    value: float | None
    achieved: float | None
    iterations: int
    message: str


@dataclass
class GoalMetrics:
    required_orders: int
    required_leads: int
    required_ad_spend: float
    is_achievable: bool
    unit_profit: float


def unit_profit(inputs: dict) -> float:
    """Steady-state profit per confirmed order after acquisition cost."""
    i = {**DEFAULTS, **(inputs or {})}
    confirmation_rate = float(i["confirmation_percentage"]) / 100.0
    delivered_rate = float(i["delivered_percentage"]) / 100.0
    upsell_rate = float(i["upsell_take_rate"]) / 100.0

    cpa = safe_div(float(i["cost_per_lead"]), confirmation_rate)
    revenue_per_order = (
        float(i["selling_price"]) * delivered_rate
        + float(i["upsell_selling_price"]) * upsell_rate * delivered_rate
    )
    cogs_per_order = float(i["product_cost"]) + float(i["upsell_product_cost"]) * upsell_rate
    shipping_per_order = (
        float(i["shipping_forward"]) * delivered_rate + float(i["shipping_rto"]) * (1 - delivered_rate)
    )
    return revenue_per_order - cogs_per_order - shipping_per_order - float(i["misc_cost"]) - cpa


def compute_goal(inputs: dict, target_profit: float) -> GoalMetrics:
    """Orders, leads and ad spend required to reach ``target_profit``.

    The target is grossed up by the fixed costs for the campaign duration and the
    one-time misc total. A non-positive unit profit makes every target unreachable.
    """
    i = {**DEFAULTS, **(inputs or {})}
    profit_per_order = unit_profit(i)
    if profit_per_order <= 0:
        return GoalMetrics(0, 0, 0.0, False, profit_per_order)

    duration = campaign_days(i["budget_duration"])
    effective_target = (
        float(target_profit)
        + fixed_costs_for_duration(i.get("fixed_monthly_costs"), duration)
        + one_time_costs_total(i.get("misc_one_time_costs"))
    )
    required_orders = max(math.ceil(effective_target / profit_per_order), 0)

    confirmation_rate = float(i["confirmation_percentage"]) / 100.0
    required_leads = math.ceil(required_orders / (confirmation_rate if confirmation_rate > 0 else 1.0))
    return GoalMetrics(
        required_orders=int(required_orders),
        required_leads=int(required_leads),
        required_ad_spend=required_leads * float(i["cost_per_lead"]),
        is_achievable=True,
        unit_profit=profit_per_order,
    )


def solve_bounded_scalar(
    evaluator: Callable[[float], float],
    target: float,
    lower_bound: float,
    upper_bound: float,
    tol: float = 1e-3,
    max_iter: int = 60,
    x_tol: float | None = None,
) -> GoalSeekResult:
    """Solve evaluator(x)=target for x within [lower_bound, upper_bound] via bisection.

    Step-shaped evaluators rarely hit the target exactly; with ``x_tol`` set the search
    stops once the bracket is that narrow and returns the endpoint at or above target.
    """
    lo = float(lower_bound)
    hi = float(upper_bound)
    if hi <= lo:
        return GoalSeekResult("failed", None, None, 0, "Upper bound must be greater than lower bound.")

    try:
        y_lo = float(evaluator(lo))
        y_hi = float(evaluator(hi))
    except Exception as exc:  # pragma: no cover - defensive path
        return GoalSeekResult("failed", None, None, 0, f"Evaluator failed at bounds: {exc}")

    f_lo = y_lo - target
    f_hi = y_hi - target
    if f_lo == 0:
        return GoalSeekResult("solved", lo, y_lo, 0, "Solved at lower bound.")
    if f_hi == 0:
        return GoalSeekResult("solved", hi, y_hi, 0, "Solved at upper bound.")
    if f_lo * f_hi > 0:
        return GoalSeekResult(
            "failed",
            None,
            None,
            0,
            "Target is not bracketed in the selected bounds. Adjust min/max bounds.",
        )

    for i in range(1, max_iter + 1):
        mid = 0.5 * (lo + hi)
        y_mid = float(evaluator(mid))
        f_mid = y_mid - target
        if abs(f_mid) <= tol:
            return GoalSeekResult("solved", mid, y_mid, i, "Converged.")
        if f_lo * f_mid < 0:
            hi, y_hi, f_hi = mid, y_mid, f_mid
        else:
            lo, y_lo, f_lo = mid, y_mid, f_mid
        if x_tol is not None and hi - lo <= x_tol:
            if f_lo > 0:
                return GoalSeekResult("solved", lo, y_lo, i, "Converged within input tolerance.")
            return GoalSeekResult("solved", hi, y_hi, i, "Converged within input tolerance.")

    mid = 0.5 * (lo + hi)
    y_mid = float(evaluator(mid))
    return GoalSeekResult(
        "failed",
        mid,
        y_mid,
        max_iter,
        "Reached max iterations before tolerance was met.",
    )


def solve_ad_spend_for_profit(
    inputs: dict,
    target_profit: float,
    upper_bound: float | None = None,
    tol: float = 1.0,
) -> GoalSeekResult:
    """Find the total campaign budget whose simulated net profit reaches ``target_profit``.

    The closed form ignores per-day lead flooring and order rounding, so this runs the
    daily engine inside a bisection over the total budget.
    """
    base = {**DEFAULTS, **(inputs or {})}

    def _net_profit(total_budget: float) -> float:
        scenario = {**base, "budget_type": "total", "ad_spend_input": float(total_budget)}
        return compute_results(scenario).net_profit

    unfunded = _net_profit(0.0)
    if unfunded >= float(target_profit):
        return GoalSeekResult("solved", 0.0, unfunded, 0, "Target is met without any ad spend.")

    if unit_profit(base) <= 0:
        return GoalSeekResult(
            "failed",
            None,
            None,
            0,
            "Unit profit is not positive; no ad budget reaches a profit target.",
        )

    if upper_bound is None:
        goal = compute_goal(base, target_profit)
        upper_bound = max(4.0 * goal.required_ad_spend, 2.0 * planned_ad_spend(base), 1000.0)

    return solve_bounded_scalar(
        _net_profit,
        target=float(target_profit),
        lower_bound=0.0,
        upper_bound=float(upper_bound),
        tol=1e-6,
        max_iter=80,
        x_tol=tol,
    )
