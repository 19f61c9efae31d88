"""Input guidance metadata and advisory range checks."""

from __future__ import annotations

from typing import Any


INPUT_GUIDANCE: dict[str, dict[str, Any]] = {
    "selling_price": {"min": 50.0, "max": 2000.0, "note": "COD price points above a few hundred tend to raise refusal rates."},
    "product_cost": {"min": 0.0, "max": 1000.0, "note": "Landed unit cost including sourcing and import duties."},
    "shipping_forward": {"min": 10.0, "max": 80.0, "note": "Carrier fee per delivered parcel, deducted from the payout."},
    "shipping_rto": {"min": 0.0, "max": 60.0, "note": "Return fee per refused parcel; zero when the carrier returns for free."},
    "misc_cost": {"min": 0.0, "max": 50.0, "note": "Packaging, call-center and handling per order."},
    "upsell_take_rate": {"min": 0.0, "max": 40.0, "note": "Share of confirmed orders that add the upsell."},
    "cost_per_lead": {"min": 2.0, "max": 60.0, "note": "Paid social COD leads vary widely by niche and market."},
    "confirmation_percentage": {"min": 30.0, "max": 80.0, "note": "Share of leads the call center confirms as orders."},
    "delivered_percentage": {"min": 40.0, "max": 90.0, "note": "Share of shipped orders accepted and paid at the door."},
    "budget_duration": {"min": 7, "max": 90, "note": "Most test campaigns run one to three months."},
    "dispatch_delay": {"min": 0, "max": 5, "note": "Days between order confirmation and handing the parcel to the carrier."},
    "delivery_time": {"min": 1, "max": 10, "note": "Carrier transit days to the customer."},
    "payout_delay": {"min": 1, "max": 15, "note": "Days for the carrier to remit collected cash."},
}

CALCULATION_LOGIC: dict[str, str] = {
    "selling_price": "Multiplied by delivered orders to give main revenue.",
    "product_cost": "Charged on every confirmed order, returned parcels included.",
    "shipping_forward": "Charged on delivered orders and netted from the payout.",
    "shipping_rto": "Charged on returned orders and netted from the payout.",
    "misc_cost": "Charged on every confirmed order at dispatch.",
    "upsell_selling_price": "Multiplied by delivered upsell orders.",
    "upsell_product_cost": "Charged on every upsell order.",
    "upsell_take_rate": "Upsell orders = round(orders x rate / 100), capped at orders.",
    "cost_per_lead": "Daily leads = floor(daily ad spend / cost per lead).",
    "confirmation_percentage": "Orders = round(leads x rate / 100).",
    "delivered_percentage": "Delivered = round(orders x rate / 100); the rest are RTO.",
    "ad_spend_input": "Spread evenly per day for a total budget, or used as-is for a daily budget.",
    "budget_duration": "Number of days ads run; fixed costs are pro-rated over it.",
    "dispatch_delay": "Fulfillment cost is paid this many days after the order.",
    "delivery_time": "Added to dispatch to get the delivery day.",
    "payout_delay": "Added to delivery to get the day cash is received.",
}

IMPACT_DETAIL: dict[str, str] = {
    "selling_price": "Raises revenue and payout on every delivered parcel.",
    "product_cost": "Raises cash tied up at dispatch and lowers margin.",
    "cost_per_lead": "Fewer leads per unit of spend; the main driver of acquisition cost.",
    "confirmation_percentage": "More orders from the same spend.",
    "delivered_percentage": "More revenue and fewer losses from returned stock.",
    "dispatch_delay": "Longer delays push cash out later but do not change profit.",
    "delivery_time": "Longer transit raises the working capital needed.",
    "payout_delay": "Longer payout delays raise the working capital needed.",
}


def _fmt(v: float) -> str:
    if abs(v - round(v)) < 1e-9:
        return f"{int(round(v))}"
    return f"{v:.3f}".rstrip("0").rstrip(".")


def calculation_logic_detail(key: str) -> str:
    if key in CALCULATION_LOGIC:
        return CALCULATION_LOGIC[key]
    if key.endswith("_percentage") or key.endswith("_rate"):
        return "Applied as a percentage (0-100) of the upstream funnel count."
    if key.endswith("_cost") or key.endswith("_price"):
        return "Applied per unit in the revenue and cost totals."
    return "Used directly by the daily simulation."


def impact_detail(key: str) -> str:
    if key in IMPACT_DETAIL:
        return IMPACT_DETAIL[key]
    if key.endswith("_cost"):
        return "Higher values lower net profit."
    if key.endswith("_price") or key.endswith("_rate") or key.endswith("_percentage"):
        return "Higher values raise revenue."
    return "Check the sensitivity tab to see how much it moves profit."


def help_with_guidance(key: str, base_help: str) -> str:
    parts = [base_help]
    g = INPUT_GUIDANCE.get(key)
    if g:
        parts.append(f"Reasonable range: {_fmt(g['min'])} to {_fmt(g['max'])}. {g['note']}")
    parts.append(f"Calculation use: {calculation_logic_detail(key)}")
    parts.append(f"Impact: {impact_detail(key)}")
    return " ".join(parts)


def advisory_warnings(inputs: dict) -> list[str]:
    warnings: list[str] = []
    flat = dict(inputs)
    flat.update(inputs.get("logistics_timeline") or {})
    for key, g in INPUT_GUIDANCE.items():
        if key not in flat:
            continue
        try:
            v = float(flat[key])
        except (TypeError, ValueError):
            continue
        if v < g["min"] or v > g["max"]:
            warnings.append(
                f"{key}={v:.3f} is outside the recommended range [{_fmt(g['min'])}, {_fmt(g['max'])}]."
            )

    try:
        margin = float(inputs["selling_price"]) - float(inputs["product_cost"]) - float(inputs["shipping_forward"]) - float(
            inputs["misc_cost"]
        )
    except (KeyError, TypeError, ValueError):
        return warnings
    if margin <= 0:
        warnings.append(
            f"Delivered unit margin before ads is {margin:.2f}; every delivered order loses money even at zero ad spend."
        )
    return warnings
