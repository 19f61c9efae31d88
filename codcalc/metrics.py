"""Aggregate results and cash-cycle metrics built on top of the daily engine."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field

import pandas as pd

from codcalc.defaults import DEFAULTS
from codcalc.formulas import (
    _num,
    fixed_costs_for_duration,
    headline_economics,
    one_time_costs_total,
)
from codcalc.model import run_model


@dataclass
class DayFlow:
    day: int
    spend: float
    revenue: float
    balance: float


@dataclass
class CashflowMetrics:
    working_capital_required: float
    peak_capital_day: int
    roi_day: int | None
    total_cycle_days: int
    daily_cashflow: list[DayFlow] = field(default_factory=list)
    net_cashflow: float = 0.0
    daily_spend_rate: float = 0.0
    # Day on which a day-0 cohort is dispatched, delivered and paid out.
    dispatch_day: int = 0
    delivery_day: int = 0
    payout_day: int = 0


@dataclass
class Results:
    revenue: float
    main_revenue: float
    upsell_revenue: float
    total_cogs: float
    total_shipping: float
    total_ads: float
    total_misc: float
    total_fixed_costs: float
    total_one_time_misc: float
    total_expenses: float
    net_profit: float
    net_margin: float
    roi: float
    roas: float
    cost_per_purchase: float
    break_even_roas: float
    average_order_value: float
    total_leads: int
    spend_implied_leads: int
    total_orders: int
    delivered_orders: int
    rto_orders: int
    total_upsell_orders: int
    delivered_upsell_orders: int
    rto_loss: float
    cashflow: CashflowMetrics

    def to_dict(self) -> dict:
        return asdict(self)


def compute_cashflow_metrics(df: pd.DataFrame) -> CashflowMetrics:
    """Trough, break-even crossing and day records from an engine frame."""
    lowest = 0.0
    peak_day = 0
    roi_day = None
    daily = []
    for day, spend, revenue, balance in zip(
        df["Day"], df["Total Outflow"], df["Total Inflow"], df["Cumulative Balance"]
    ):
        day = int(day)
        balance = float(balance)
        daily.append(DayFlow(day=day, spend=float(spend), revenue=float(revenue), balance=balance))
        if balance < lowest:
            lowest = balance
            peak_day = day
        if roi_day is None and day > 0 and balance > 0:
            roi_day = day

    dispatch_delay = int(df.attrs.get("dispatch_delay", 0))
    delivery_time = int(df.attrs.get("delivery_time", 0))
    total_lag = int(df.attrs.get("total_lag", 0))
    return CashflowMetrics(
        working_capital_required=abs(lowest),
        peak_capital_day=peak_day,
        roi_day=roi_day,
        total_cycle_days=total_lag,
        daily_cashflow=daily,
        net_cashflow=daily[-1].balance if daily else 0.0,
        daily_spend_rate=float(df.attrs.get("daily_base_spend", 0.0)),
        dispatch_day=dispatch_delay,
        delivery_day=dispatch_delay + delivery_time,
        payout_day=total_lag,
    )


def compute_results(inputs: dict) -> Results:
    """Run the engine and fold its per-day arrays into the headline ``Results``."""
    i = {**DEFAULTS, **(inputs or {})}
    df = run_model(i)
    duration = int(df.attrs["budget_duration"])

    counts = {
        "leads": float(df["Leads"].sum()),
        "orders": float(df["Orders"].sum()),
        "delivered": float(df["Delivered Orders"].sum()),
        "rto": float(df["RTO Orders"].sum()),
        "upsell_orders": float(df["Upsell Orders"].sum()),
        "delivered_upsell": float(df["Delivered Upsell Orders"].sum()),
    }
    total_ads = float(df["Ad Spend"].sum())
    economics = headline_economics(
        i,
        counts,
        total_ads,
        fixed_costs_for_duration(i.get("fixed_monthly_costs"), duration),
        one_time_costs_total(i.get("misc_one_time_costs")),
    )

    cost_per_lead = _num(i, "cost_per_lead")
    spend_implied_leads = int(math.floor(total_ads / cost_per_lead)) if cost_per_lead > 0 else 0
    rto_loss = counts["rto"] * (
        _num(i, "product_cost") + _num(i, "misc_cost") + _num(i, "shipping_rto")
    )

    return Results(
        **economics,
        total_leads=int(counts["leads"]),
        spend_implied_leads=spend_implied_leads,
        total_orders=int(counts["orders"]),
        delivered_orders=int(counts["delivered"]),
        rto_orders=int(counts["rto"]),
        total_upsell_orders=int(counts["upsell_orders"]),
        delivered_upsell_orders=int(counts["delivered_upsell"]),
        rto_loss=rto_loss,
        cashflow=compute_cashflow_metrics(df),
    )
