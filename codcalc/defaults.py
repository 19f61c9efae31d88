"""Default assumptions and display constants for the COD cashflow calculator."""

from __future__ import annotations


DEFAULTS: dict = {
    # Unit economics (per unit, currency agnostic).
    "selling_price": 400.0,
    "product_cost": 100.0,
    "shipping_forward": 30.0,
    "shipping_rto": 0.0,
    "misc_cost": 10.0,
    # Upsell bundled in the same parcel.
    "upsell_selling_price": 0.0,
    "upsell_product_cost": 0.0,
    "upsell_take_rate": 0.0,
    # Funnel rates, percent 0-100.
    "cost_per_lead": 15.0,
    "confirmation_percentage": 50.0,
    "delivered_percentage": 70.0,
    # Budget.
    "ad_spend_input": 5000.0,
    "budget_type": "total",
    "budget_duration": 30,
    "ad_schedule": [],
    # Overheads.
    "misc_one_time_costs": [],
    "fixed_monthly_costs": [],
    # Order -> dispatch -> delivery -> payout, in days.
    "logistics_timeline": {
        "dispatch_delay": 1,
        "delivery_time": 3,
        "payout_delay": 2,
    },
}


CURRENCY_SYMBOLS = {
    "USD": "$",
    "INR": "₹",
    "EUR": "€",
    "GBP": "£",
    "MAD": "MAD ",
}
DEFAULT_CURRENCY = "MAD"


CHART_COLORS = {
    "profit": "#10b981",
    "loss": "#ef4444",
    "ads": "#3b82f6",
    "cogs": "#f59e0b",
    "shipping": "#8b5cf6",
    "misc": "#64748b",
    "fixed": "#ec4899",
    "extras": "#6366f1",
}
