"""Daily funnel and cash-balance simulation engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from codcalc.defaults import DEFAULTS
from codcalc.formulas import (
    DAYS_PER_MONTH,
    _num,
    base_daily_spend,
    campaign_days,
    funnel_counts,
)


# Extra days simulated after the last cohort's payout.
SAFETY_BUFFER_DAYS = 5


@dataclass
class ModelInputs:
    data: Dict

    def __getattr__(self, key):
        if key in self.data:
            return self.data[key]
        raise AttributeError(key)


def _lag_days(timeline: dict | None) -> tuple[int, int, int]:
    """Non-negative whole-day lags; unparsable or non-finite entries fall back to the default."""
    merged = {**DEFAULTS["logistics_timeline"], **(timeline or {})}
    lags = []
    for key in ("dispatch_delay", "delivery_time", "payout_delay"):
        try:
            days = int(float(merged[key]))
        except (TypeError, ValueError, OverflowError):
            days = int(DEFAULTS["logistics_timeline"][key])
        lags.append(max(0, days))
    return lags[0], lags[1], lags[2]


def daily_ad_spend(inputs: dict, duration: int) -> np.ndarray:
    """Per-day ad spend over the campaign window, schedule events applied."""
    spend = np.full(duration, base_daily_spend(inputs, duration), dtype=float)
    for event in inputs.get("ad_schedule") or []:
        idx = int(event.get("day", 1)) - 1
        amount = float(event.get("amount", 0.0))
        if event.get("type") == "increase_daily":
            # Permanent step from the event day onward.
            spend[max(idx, 0):] += amount
        elif event.get("type") == "one_time_injection" and 0 <= idx < duration:
            spend[idx] += amount
    return spend


def _lagged(series: np.ndarray, lag: int, length: int) -> np.ndarray:
    """Shift per-origin-day amounts forward by ``lag`` days onto a ``length``-day axis."""
    out = np.zeros(length, dtype=float)
    n = min(len(series), length - lag)
    if n > 0:
        out[lag : lag + n] = series[:n]
    return out


def _padded(series: np.ndarray, length: int) -> np.ndarray:
    out = np.zeros(length, dtype=float)
    out[: len(series)] = series
    return out


def run_model(raw_inputs: Dict) -> pd.DataFrame:
    """Simulate the campaign day by day and return one row per simulated day.

    Orders placed on day ``d`` pay their fulfillment cost on ``d + dispatch_delay``
    and come back as payout cash on ``d + total_lag``. The horizon runs past the
    campaign until the last cohort settles plus a small buffer.
    """
    i = ModelInputs({**DEFAULTS, **(raw_inputs or {})})

    duration = campaign_days(i.budget_duration)
    dispatch_delay, delivery_time, payout_delay = _lag_days(i.logistics_timeline)
    total_lag = dispatch_delay + delivery_time + payout_delay
    simulation_days = duration + total_lag + SAFETY_BUFFER_DAYS
    horizon = simulation_days + 1

    days = np.arange(horizon)
    in_campaign = days < duration

    spend = daily_ad_spend(i.data, duration)
    funnel = funnel_counts(
        spend,
        _num(i.data, "cost_per_lead"),
        _num(i.data, "confirmation_percentage"),
        _num(i.data, "delivered_percentage"),
        _num(i.data, "upsell_take_rate"),
    )
    orders = funnel["orders"]
    delivered = funnel["delivered"]
    rto = funnel["rto"]
    upsell_orders = funnel["upsell_orders"]
    delivered_upsell = funnel["delivered_upsell"]

    # Cohort amounts indexed by origin day.
    cohort_fulfillment = (
        orders * _num(i.data, "product_cost")
        + upsell_orders * _num(i.data, "upsell_product_cost")
        + orders * _num(i.data, "misc_cost")
    )
    cohort_gross_payout = (
        delivered * _num(i.data, "selling_price") + delivered_upsell * _num(i.data, "upsell_selling_price")
    )
    cohort_payout_shipping = delivered * _num(i.data, "shipping_forward") + rto * _num(i.data, "shipping_rto")

    fulfillment_cost = _lagged(cohort_fulfillment, dispatch_delay, horizon)
    gross_payout = _lagged(cohort_gross_payout, total_lag, horizon)
    payout_shipping = _lagged(cohort_payout_shipping, total_lag, horizon)
    payout_revenue = gross_payout - payout_shipping

    monthly_fixed = sum(float(c.get("amount", 0.0)) for c in i.fixed_monthly_costs or [])
    fixed_cost = np.where(in_campaign, monthly_fixed / DAYS_PER_MONTH, 0.0)

    one_time_misc = np.zeros(horizon, dtype=float)
    for cost in i.misc_one_time_costs or []:
        idx = int(cost.get("day", 1)) - 1
        if 0 <= idx < horizon:
            one_time_misc[idx] += float(cost.get("amount", 0.0))

    ad_spend = _padded(spend, horizon)
    total_outflow = fixed_cost + one_time_misc + ad_spend + fulfillment_cost
    total_inflow = payout_revenue
    net_cash_flow = total_inflow - total_outflow
    cumulative_balance = np.cumsum(net_cash_flow)

    df = pd.DataFrame(
        {
            "Day": days.astype(int),
            "In Campaign": in_campaign,
            "Ad Spend": ad_spend,
            "Leads": _padded(funnel["leads"], horizon),
            "Orders": _padded(orders, horizon),
            "Delivered Orders": _padded(delivered, horizon),
            "RTO Orders": _padded(rto, horizon),
            "Upsell Orders": _padded(upsell_orders, horizon),
            "Delivered Upsell Orders": _padded(delivered_upsell, horizon),
            "Fixed Cost": fixed_cost,
            "One-time Misc Cost": one_time_misc,
            "Fulfillment Cost": fulfillment_cost,
            "Gross Payout": gross_payout,
            "Payout Shipping": payout_shipping,
            "Payout Revenue": payout_revenue,
            "Total Outflow": total_outflow,
            "Total Inflow": total_inflow,
            "Net Cash Flow": net_cash_flow,
            "Cumulative Balance": cumulative_balance,
        }
    )
    df.attrs["budget_duration"] = duration
    df.attrs["total_lag"] = total_lag
    df.attrs["dispatch_delay"] = dispatch_delay
    df.attrs["delivery_time"] = delivery_time
    df.attrs["payout_delay"] = payout_delay
    df.attrs["daily_base_spend"] = base_daily_spend(i.data, duration)
    df.attrs["simulation_days"] = simulation_days
    return df
