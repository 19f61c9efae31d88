"""Stateless unit-economics formulas shared by the snapshot calculator and the daily engine."""

from __future__ import annotations

import math

import numpy as np

from codcalc.defaults import DEFAULTS


DAYS_PER_MONTH = 30


def safe_div(a: float, b: float) -> float:
    """Divide, returning 0.0 when the divisor is zero or negative."""
    return float(a / b) if b > 0 else 0.0


def round_half_up(values):
    """Round .5 away from zero for non-negative counts (floor(x + 0.5))."""
    return np.floor(np.asarray(values, dtype=float) + 0.5)


def _num(inputs: dict, key: str) -> float:
    """Numeric input ``key``; missing, unparsable or non-finite values fall back to the default."""
    value = inputs.get(key, DEFAULTS[key])
    try:
        number = float(value)
    except (TypeError, ValueError):
        return float(DEFAULTS[key])
    return number if math.isfinite(number) else float(DEFAULTS[key])


def campaign_days(budget_duration) -> int:
    """Campaign length in days; anything below one day or non-finite counts as a single day."""
    try:
        days = int(float(budget_duration))
    except (TypeError, ValueError, OverflowError):
        days = 1
    return max(days, 1)


def base_daily_spend(inputs: dict, duration: int | None = None) -> float:
    if duration is None:
        duration = campaign_days(inputs.get("budget_duration", DEFAULTS["budget_duration"]))
    spend = _num(inputs, "ad_spend_input")
    if str(inputs.get("budget_type", DEFAULTS["budget_type"])) == "daily":
        return spend
    return spend / max(int(duration), 1)


def planned_ad_spend(inputs: dict) -> float:
    """Closed-form total of the daily ad schedule across the campaign window."""
    duration = campaign_days(inputs.get("budget_duration", DEFAULTS["budget_duration"]))
    total = base_daily_spend(inputs, duration) * duration
    for event in inputs.get("ad_schedule") or []:
        idx = int(event.get("day", 1)) - 1
        amount = float(event.get("amount", 0.0))
        if event.get("type") == "increase_daily":
            active_days = duration - max(idx, 0)
            if active_days > 0:
                total += amount * active_days
        elif event.get("type") == "one_time_injection" and 0 <= idx < duration:
            total += amount
    return float(total)


def fixed_costs_for_duration(fixed_costs: list[dict] | None, duration: int) -> float:
    """Pro-rate monthly fixed costs over the campaign using a flat 30-day month."""
    monthly = sum(float(c.get("amount", 0.0)) for c in fixed_costs or [])
    return monthly / DAYS_PER_MONTH * campaign_days(duration)


def one_time_costs_total(costs: list[dict] | None) -> float:
    return float(sum(float(c.get("amount", 0.0)) for c in costs or []))


def funnel_counts(
    ad_spend,
    cost_per_lead: float,
    confirmation_percentage: float,
    delivered_percentage: float,
    upsell_take_rate: float,
) -> dict[str, np.ndarray]:
    """Expand ad spend (scalar or per-day array) into lead/order/delivery counts.

    Every split uses round-half-up on ``count * pct / 100``. Delivered counts are
    clamped to the orders they come from, upsells to the main orders, and
    delivered upsells to the upsell orders.
    """
    spend = np.asarray(ad_spend, dtype=float)
    if cost_per_lead > 0:
        leads = np.floor(spend / float(cost_per_lead))
    else:
        leads = np.zeros_like(spend)

    orders = round_half_up(leads * float(confirmation_percentage) / 100.0)
    delivered = np.clip(round_half_up(orders * float(delivered_percentage) / 100.0), 0.0, orders)
    rto = orders - delivered

    upsell_orders = np.clip(round_half_up(orders * float(upsell_take_rate) / 100.0), 0.0, orders)
    delivered_upsell = np.clip(
        round_half_up(upsell_orders * float(delivered_percentage) / 100.0), 0.0, upsell_orders
    )
    return {
        "leads": leads,
        "orders": orders,
        "delivered": delivered,
        "rto": rto,
        "upsell_orders": upsell_orders,
        "delivered_upsell": delivered_upsell,
    }


def headline_economics(
    inputs: dict,
    counts: dict,
    total_ads: float,
    total_fixed_costs: float = 0.0,
    total_one_time_misc: float = 0.0,
) -> dict:
    """Revenue, cost breakdown and ratios for aggregate funnel counts.

    Product cost and per-order misc are charged on every order, RTO included.
    Forward shipping applies to delivered orders only and RTO shipping to returns only.
    """
    orders = float(counts["orders"])
    delivered = float(counts["delivered"])
    rto = float(counts["rto"])
    upsell_orders = float(counts["upsell_orders"])
    delivered_upsell = float(counts["delivered_upsell"])

    main_revenue = delivered * _num(inputs, "selling_price")
    upsell_revenue = delivered_upsell * _num(inputs, "upsell_selling_price")
    revenue = main_revenue + upsell_revenue

    total_cogs = orders * _num(inputs, "product_cost") + upsell_orders * _num(inputs, "upsell_product_cost")
    total_shipping = delivered * _num(inputs, "shipping_forward") + rto * _num(inputs, "shipping_rto")
    total_misc = orders * _num(inputs, "misc_cost")
    total_ads = float(total_ads)

    non_ad_costs = total_cogs + total_shipping + total_misc + total_fixed_costs + total_one_time_misc
    total_expenses = non_ad_costs + total_ads
    net_profit = revenue - total_expenses

    # Ad spend that would exactly consume the remaining margin.
    break_even_ad_spend = revenue - non_ad_costs

    return {
        "revenue": revenue,
        "main_revenue": main_revenue,
        "upsell_revenue": upsell_revenue,
        "total_cogs": total_cogs,
        "total_shipping": total_shipping,
        "total_ads": total_ads,
        "total_misc": total_misc,
        "total_fixed_costs": float(total_fixed_costs),
        "total_one_time_misc": float(total_one_time_misc),
        "total_expenses": total_expenses,
        "net_profit": net_profit,
        "net_margin": safe_div(net_profit, revenue) * 100,
        "roi": safe_div(net_profit, total_expenses) * 100,
        "roas": safe_div(revenue, total_ads),
        "cost_per_purchase": safe_div(total_ads, orders),
        "break_even_roas": safe_div(revenue, break_even_ad_spend),
        "average_order_value": safe_div(revenue, delivered),
    }


def calculate_metrics(inputs: dict) -> dict:
    """Uniform-flow snapshot: the whole planned budget pushed through the funnel once."""
    duration = campaign_days(inputs.get("budget_duration", DEFAULTS["budget_duration"]))
    total_ads = planned_ad_spend(inputs)
    counts = {
        k: float(v)
        for k, v in funnel_counts(
            total_ads,
            _num(inputs, "cost_per_lead"),
            _num(inputs, "confirmation_percentage"),
            _num(inputs, "delivered_percentage"),
            _num(inputs, "upsell_take_rate"),
        ).items()
    }
    economics = headline_economics(
        inputs,
        counts,
        total_ads,
        fixed_costs_for_duration(inputs.get("fixed_monthly_costs"), duration),
        one_time_costs_total(inputs.get("misc_one_time_costs")),
    )
    return {
        "total_leads": int(counts["leads"]),
        "total_orders": int(counts["orders"]),
        "delivered_orders": int(counts["delivered"]),
        "rto_orders": int(counts["rto"]),
        "total_upsell_orders": int(counts["upsell_orders"]),
        "delivered_upsell_orders": int(counts["delivered_upsell"]),
        **economics,
    }


def format_currency(amount: float, symbol: str) -> str:
    """Display an amount with a cosmetic currency symbol and up to two decimals."""
    value = float(amount)
    if math.isnan(value):
        return ""
    text = f"{abs(value):,.2f}".rstrip("0").rstrip(".")
    if value < 0:
        return f"-{symbol}{text}"
    return f"{symbol}{text}"


def format_percent(value: float) -> str:
    return f"{float(value):,.1f}%"
