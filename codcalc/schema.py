"""Input schema helpers, constants, and migration utilities."""

from __future__ import annotations

import uuid
from copy import deepcopy
from typing import Any

import pandas as pd

from codcalc.defaults import DEFAULTS


BUDGET_TYPES = {"daily", "total"}
EVENT_TYPES = {"increase_daily", "one_time_injection"}
EVENT_TYPE_LABELS = {
    "increase_daily": "Increase daily spend",
    "one_time_injection": "One-time injection",
}

MAX_BUDGET_DURATION = 365

PERCENT_KEYS = ("confirmation_percentage", "delivered_percentage", "upsell_take_rate")
MONEY_KEYS = (
    "selling_price",
    "product_cost",
    "shipping_forward",
    "shipping_rto",
    "misc_cost",
    "upsell_selling_price",
    "upsell_product_cost",
    "cost_per_lead",
    "ad_spend_input",
)
TIMELINE_MINIMUMS = {"dispatch_delay": 0, "delivery_time": 1, "payout_delay": 1}

# Payloads saved by the browser calculator used camelCase keys.
LEGACY_KEY_MAP = {
    "sellingPrice": "selling_price",
    "productCost": "product_cost",
    "shippingForward": "shipping_forward",
    "shippingRTO": "shipping_rto",
    "miscCost": "misc_cost",
    "upsellSellingPrice": "upsell_selling_price",
    "upsellProductCost": "upsell_product_cost",
    "upsellTakeRate": "upsell_take_rate",
    "costPerLead": "cost_per_lead",
    "confirmationPercentage": "confirmation_percentage",
    "deliveredPercentage": "delivered_percentage",
    "adSpendInput": "ad_spend_input",
    "budgetType": "budget_type",
    "budgetDuration": "budget_duration",
    "adSchedule": "ad_schedule",
    "miscOneTimeCosts": "misc_one_time_costs",
    "fixedMonthlyCosts": "fixed_monthly_costs",
    "logisticsTimeline": "logistics_timeline",
}
LEGACY_TIMELINE_KEYS = {
    "dispatchDelay": "dispatch_delay",
    "deliveryTime": "delivery_time",
    "payoutDelay": "payout_delay",
}
LEGACY_TOTAL_BUDGET_KEY = "totalAdSpend"


def new_item_id() -> str:
    """Identifier for list rows; only used to track rows in editors."""
    return uuid.uuid4().hex[:12]


def _records(raw_rows: Any, warnings: list[str], key_name: str) -> list | None:
    if raw_rows is None:
        return []
    if isinstance(raw_rows, pd.DataFrame):
        return raw_rows.to_dict(orient="records")
    if isinstance(raw_rows, list):
        return raw_rows
    warnings.append(f"{key_name} ignored because it is not a list/table.")
    return None


def _row_id(item: dict) -> str:
    raw_id = item.get("id")
    if raw_id is None or (not isinstance(raw_id, str) and pd.isna(raw_id)) or str(raw_id).strip() == "":
        return new_item_id()
    return str(raw_id)


def _row_day(item: dict) -> int:
    return int(float(item.get("day")))


def _row_amount(item: dict) -> float:
    amount = float(item.get("amount"))
    if pd.isna(amount):
        raise ValueError("amount is NaN")
    return max(0.0, amount)


def _row_description(item: dict) -> str:
    desc = item.get("description")
    if desc is None or (not isinstance(desc, str) and pd.isna(desc)):
        return ""
    return str(desc).strip()


def _sanitize_ad_schedule(raw_rows: Any, duration: int, warnings: list[str], key_name: str = "ad_schedule") -> list[dict]:
    records = _records(raw_rows, warnings, key_name)
    if not records:
        return []

    sanitized: list[dict] = []
    for idx, item in enumerate(records):
        if not isinstance(item, dict):
            warnings.append(f"{key_name}[{idx}] ignored because entry is not an object.")
            continue
        try:
            day = _row_day(item)
        except (TypeError, ValueError, OverflowError):
            warnings.append(f"{key_name}[{idx}] ignored because day is missing or invalid.")
            continue
        if day < 1:
            warnings.append(f"{key_name}[{idx}] ignored because day must be 1 or later.")
            continue
        event_type = str(item.get("type", "")).strip()
        if event_type not in EVENT_TYPES:
            warnings.append(f"{key_name}[{idx}] ignored because type '{event_type}' is not recognized.")
            continue
        try:
            amount = _row_amount(item)
        except (TypeError, ValueError):
            warnings.append(f"{key_name}[{idx}] ignored because amount is invalid.")
            continue
        if day > duration:
            warnings.append(f"{key_name}[{idx}] day {day} is after the {duration}-day campaign and has no effect.")
        sanitized.append({"id": _row_id(item), "day": day, "type": event_type, "amount": amount})
    return sorted(sanitized, key=lambda r: r["day"])


def _sanitize_misc_costs(
    raw_rows: Any, duration: int, warnings: list[str], key_name: str = "misc_one_time_costs"
) -> list[dict]:
    records = _records(raw_rows, warnings, key_name)
    if not records:
        return []

    sanitized: list[dict] = []
    for idx, item in enumerate(records):
        if not isinstance(item, dict):
            warnings.append(f"{key_name}[{idx}] ignored because entry is not an object.")
            continue
        try:
            day = _row_day(item)
        except (TypeError, ValueError, OverflowError):
            warnings.append(f"{key_name}[{idx}] ignored because day is missing or invalid.")
            continue
        if day < 1:
            warnings.append(f"{key_name}[{idx}] ignored because day must be 1 or later.")
            continue
        try:
            amount = _row_amount(item)
        except (TypeError, ValueError):
            warnings.append(f"{key_name}[{idx}] ignored because amount is invalid.")
            continue
        if day > duration:
            warnings.append(
                f"{key_name}[{idx}] day {day} is after the {duration}-day campaign; it still counts toward totals."
            )
        sanitized.append({"id": _row_id(item), "day": day, "amount": amount, "description": _row_description(item)})
    return sorted(sanitized, key=lambda r: r["day"])


def _sanitize_fixed_costs(raw_rows: Any, warnings: list[str], key_name: str = "fixed_monthly_costs") -> list[dict]:
    records = _records(raw_rows, warnings, key_name)
    if not records:
        return []

    sanitized: list[dict] = []
    for idx, item in enumerate(records):
        if not isinstance(item, dict):
            warnings.append(f"{key_name}[{idx}] ignored because entry is not an object.")
            continue
        try:
            amount = _row_amount(item)
        except (TypeError, ValueError):
            warnings.append(f"{key_name}[{idx}] ignored because amount is invalid.")
            continue
        sanitized.append({"id": _row_id(item), "description": _row_description(item), "amount": amount})
    return sanitized


def _sanitize_timeline(raw_timeline: Any, warnings: list[str]) -> dict:
    timeline = deepcopy(DEFAULTS["logistics_timeline"])
    if not isinstance(raw_timeline, dict):
        warnings.append("logistics_timeline invalid; reset to default.")
        return timeline

    for k, v in raw_timeline.items():
        key = LEGACY_TIMELINE_KEYS.get(k, k)
        if key in timeline:
            timeline[key] = v
    for key, minimum in TIMELINE_MINIMUMS.items():
        try:
            timeline[key] = max(minimum, int(float(timeline[key])))
        except (TypeError, ValueError, OverflowError):
            timeline[key] = DEFAULTS["logistics_timeline"][key]
            warnings.append(f"logistics_timeline.{key} invalid and reset to default.")
    return timeline


def migrate_assumptions(raw_inputs: dict) -> tuple[dict, list[str], list[str]]:
    """Merge incoming assumptions onto defaults, bridge legacy keys and clamp values."""
    warnings: list[str] = []
    unknown_keys: list[str] = []
    legacy_fields: dict[str, Any] = {}
    inputs = deepcopy(DEFAULTS)
    payload = raw_inputs if isinstance(raw_inputs, dict) else {}

    for k, v in payload.items():
        if k in inputs:
            inputs[k] = v
        elif k in LEGACY_KEY_MAP or k == LEGACY_TOTAL_BUDGET_KEY:
            legacy_fields[k] = v
        else:
            unknown_keys.append(k)

    migrated = []
    for legacy_key, key in LEGACY_KEY_MAP.items():
        if legacy_key in legacy_fields and key not in payload:
            inputs[key] = deepcopy(legacy_fields[legacy_key])
            migrated.append(legacy_key)
    if migrated:
        warnings.append(f"Migrated legacy keys: {', '.join(migrated)}.")

    if LEGACY_TOTAL_BUDGET_KEY in legacy_fields and "ad_spend_input" not in payload and "adSpendInput" not in payload:
        inputs["ad_spend_input"] = legacy_fields[LEGACY_TOTAL_BUDGET_KEY]
        inputs["budget_type"] = "total"
        warnings.append("totalAdSpend is deprecated; migrated to ad_spend_input with budget_type=total.")

    # Enumerations and clamping.
    inputs["budget_type"] = str(inputs.get("budget_type", "total")).strip().lower()
    if inputs["budget_type"] not in BUDGET_TYPES:
        warnings.append("budget_type invalid; reset to total.")
        inputs["budget_type"] = "total"

    try:
        inputs["budget_duration"] = int(min(MAX_BUDGET_DURATION, max(1, int(float(inputs["budget_duration"])))))
    except (TypeError, ValueError, OverflowError):
        inputs["budget_duration"] = int(DEFAULTS["budget_duration"])
        warnings.append("budget_duration invalid and reset to default.")

    for key in PERCENT_KEYS:
        try:
            inputs[key] = float(min(100.0, max(0.0, float(inputs[key]))))
        except (TypeError, ValueError):
            inputs[key] = float(DEFAULTS[key])
            warnings.append(f"{key} invalid and reset to default.")

    for key in MONEY_KEYS:
        try:
            inputs[key] = max(0.0, float(inputs[key]))
        except (TypeError, ValueError):
            inputs[key] = float(DEFAULTS[key])
            warnings.append(f"{key} invalid and reset to default.")

    inputs["logistics_timeline"] = _sanitize_timeline(inputs.get("logistics_timeline"), warnings)

    duration = inputs["budget_duration"]
    inputs["ad_schedule"] = _sanitize_ad_schedule(inputs.get("ad_schedule"), duration, warnings)
    inputs["misc_one_time_costs"] = _sanitize_misc_costs(inputs.get("misc_one_time_costs"), duration, warnings)
    inputs["fixed_monthly_costs"] = _sanitize_fixed_costs(inputs.get("fixed_monthly_costs"), warnings)

    return inputs, warnings, sorted(unknown_keys)
