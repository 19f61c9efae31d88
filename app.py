import json
from copy import deepcopy
from dataclasses import asdict

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

from codcalc.defaults import CHART_COLORS, CURRENCY_SYMBOLS, DEFAULT_CURRENCY, DEFAULTS
from codcalc.embed import build_wordpress_plugin_zip, generate_widget_code
from codcalc.formulas import calculate_metrics, format_currency, format_percent
from codcalc.goal_seek import compute_goal, solve_ad_spend_for_profit
from codcalc.input_metadata import advisory_warnings, help_with_guidance
from codcalc.integrity_checks import run_integrity_checks
from codcalc.metrics import Results, compute_results
from codcalc.model import run_model
from codcalc.narrative import request_narrative
from codcalc.runtime_logging import (
    EVENT_GOAL_SEEK_FAILED,
    EVENT_INPUT_WARNINGS,
    EVENT_INTEGRITY_FAILED,
    EVENT_MODEL_RUN_FAILED,
    append_runtime_event,
    clear_runtime_events,
    install_global_exception_logging,
    level_counts,
    log_warning_batch,
    read_runtime_events,
    runtime_events_frame,
    runtime_log_path,
)
from codcalc.schema import EVENT_TYPE_LABELS, migrate_assumptions
from codcalc.sensitivity import (
    DEFAULT_SENSITIVITY_DRIVERS,
    TARGET_OPTIONS,
    available_sensitivity_drivers,
    run_one_way_sensitivity,
)
from codcalc.settings import get_app_url


install_global_exception_logging()


LIST_KEYS = ("ad_schedule", "misc_one_time_costs", "fixed_monthly_costs")
TIMELINE_KEYS = tuple(DEFAULTS["logistics_timeline"].keys())
SCALAR_KEYS = tuple(k for k in DEFAULTS if k not in LIST_KEYS and k != "logistics_timeline")

LIST_COLUMNS = {
    "ad_schedule": {"id": "object", "day": "Int64", "type": "object", "amount": "float64"},
    "misc_one_time_costs": {"id": "object", "day": "Int64", "amount": "float64", "description": "object"},
    "fixed_monthly_costs": {"id": "object", "description": "object", "amount": "float64"},
}

UI_DEFAULTS = {
    "currency": DEFAULT_CURRENCY,
    "goal_target_profit": 1000.0,
    "goal_seek_result": None,
    "narrative_result": None,
    "sensitivity_delta_pct": 10.0,
    "sensitivity_drivers": [],
    "sensitivity_target": TARGET_OPTIONS[0],
    "embed_height": 900,
    "runtime_log_limit": 120,
}


def _list_frame(key: str, rows: list[dict]) -> pd.DataFrame:
    columns = LIST_COLUMNS[key]
    df = pd.DataFrame(rows, columns=list(columns))
    return df.astype(columns)


def _reset_inputs() -> None:
    for k in SCALAR_KEYS:
        st.session_state[k] = deepcopy(DEFAULTS[k])
    for k in TIMELINE_KEYS:
        st.session_state[k] = DEFAULTS["logistics_timeline"][k]
    for k in LIST_KEYS:
        st.session_state[f"{k}_master"] = _list_frame(k, DEFAULTS[k])
        st.session_state.pop(f"{k}_editor", None)
    st.session_state["goal_seek_result"] = None
    st.session_state["narrative_result"] = None


def _serialize_assumptions(assumptions: dict) -> str:
    return json.dumps(assumptions, sort_keys=True, separators=(",", ":"))


def _stable_json(value) -> str:
    return json.dumps(value, sort_keys=True, default=str)


@st.cache_data(show_spinner=False)
def _run_model_cached(assumptions_json: str) -> tuple[pd.DataFrame, Results]:
    assumptions = json.loads(assumptions_json)
    return run_model(assumptions), compute_results(assumptions)


@st.cache_data(show_spinner=False)
def _run_sensitivity_cached(assumptions_json: str, delta: float, drivers: tuple[str, ...]) -> pd.DataFrame:
    assumptions = json.loads(assumptions_json)
    return run_one_way_sensitivity(assumptions, delta, drivers=list(drivers))


def _log_once(signature_key: str, payload, level: str, event: str, message: str, context: dict) -> None:
    signature = _stable_json(payload)
    if payload and st.session_state.get(signature_key) != signature:
        append_runtime_event(level=level, event=event, message=message, context=context)
        st.session_state[signature_key] = signature
    elif not payload:
        st.session_state[signature_key] = ""


st.set_page_config(page_title="COD Cashflow Calculator", layout="wide")
st.title("COD Profit & Cashflow Calculator")
st.caption("Daily funnel and cash-balance simulation for cash-on-delivery campaigns.")

for k in SCALAR_KEYS:
    st.session_state.setdefault(k, deepcopy(DEFAULTS[k]))
for k in TIMELINE_KEYS:
    st.session_state.setdefault(k, DEFAULTS["logistics_timeline"][k])
for k in LIST_KEYS:
    if f"{k}_master" not in st.session_state:
        st.session_state[f"{k}_master"] = _list_frame(k, DEFAULTS[k])
for k, v in UI_DEFAULTS.items():
    st.session_state.setdefault(k, deepcopy(v))
st.session_state.setdefault("_input_warning_log_signature", "")
st.session_state.setdefault("_integrity_log_signature", "")

edited_lists: dict[str, pd.DataFrame] = {}

with st.sidebar:
    st.header("Inputs")
    st.selectbox(
        "Currency",
        options=list(CURRENCY_SYMBOLS.keys()),
        key="currency",
        help="Display symbol only; no conversion is applied.",
    )
    st.button("Reset to defaults", on_click=_reset_inputs, help="Restore every input to its default value.")

    with st.expander("Unit Economics", expanded=True):
        st.number_input(
            "Selling Price", min_value=0.0, step=10.0, key="selling_price",
            help=help_with_guidance("selling_price", "Price collected at the door for one unit."),
        )
        st.number_input(
            "Product Cost", min_value=0.0, step=5.0, key="product_cost",
            help=help_with_guidance("product_cost", "Cost of one unit."),
        )
        st.number_input(
            "Forward Shipping", min_value=0.0, step=1.0, key="shipping_forward",
            help=help_with_guidance("shipping_forward", "Shipping fee on delivered parcels."),
        )
        st.number_input(
            "RTO Shipping", min_value=0.0, step=1.0, key="shipping_rto",
            help=help_with_guidance("shipping_rto", "Shipping fee on returned parcels."),
        )
        st.number_input(
            "Misc Cost per Order", min_value=0.0, step=1.0, key="misc_cost",
            help=help_with_guidance("misc_cost", "Packaging and handling per confirmed order."),
        )

    with st.expander("Upsell", expanded=False):
        st.number_input(
            "Upsell Selling Price", min_value=0.0, step=10.0, key="upsell_selling_price",
            help=help_with_guidance("upsell_selling_price", "Price of the add-on item."),
        )
        st.number_input(
            "Upsell Product Cost", min_value=0.0, step=5.0, key="upsell_product_cost",
            help=help_with_guidance("upsell_product_cost", "Cost of the add-on item."),
        )
        st.slider(
            "Upsell Take Rate (%)", min_value=0.0, max_value=100.0, step=0.5, key="upsell_take_rate",
            help=help_with_guidance("upsell_take_rate", "Share of orders that add the upsell."),
        )

    with st.expander("Funnel", expanded=True):
        st.number_input(
            "Cost per Lead", min_value=0.0, step=0.5, key="cost_per_lead",
            help=help_with_guidance("cost_per_lead", "Ad cost of one lead."),
        )
        st.slider(
            "Confirmation Rate (%)", min_value=0.0, max_value=100.0, step=0.5, key="confirmation_percentage",
            help=help_with_guidance("confirmation_percentage", "Leads confirmed as orders."),
        )
        st.slider(
            "Delivered Rate (%)", min_value=0.0, max_value=100.0, step=0.5, key="delivered_percentage",
            help=help_with_guidance("delivered_percentage", "Orders delivered and paid; the rest return (RTO)."),
        )

    with st.expander("Budget", expanded=True):
        st.radio(
            "Budget Type",
            options=["total", "daily"],
            format_func=lambda v: "Total campaign budget" if v == "total" else "Daily budget",
            key="budget_type",
            horizontal=True,
        )
        st.number_input(
            "Ad Spend", min_value=0.0, step=100.0, key="ad_spend_input",
            help=help_with_guidance("ad_spend_input", "Campaign total or per-day amount depending on budget type."),
        )
        st.number_input(
            "Campaign Duration (days)", min_value=1, max_value=365, step=1, key="budget_duration",
            help=help_with_guidance("budget_duration", "Days the ads run."),
        )

    with st.expander("Logistics Timeline", expanded=False):
        st.number_input(
            "Dispatch Delay (days)", min_value=0, step=1, key="dispatch_delay",
            help=help_with_guidance("dispatch_delay", "Order to carrier pickup."),
        )
        st.number_input(
            "Delivery Time (days)", min_value=1, step=1, key="delivery_time",
            help=help_with_guidance("delivery_time", "Carrier transit."),
        )
        st.number_input(
            "Payout Delay (days)", min_value=1, step=1, key="payout_delay",
            help=help_with_guidance("payout_delay", "Delivery to cash remittance."),
        )

    with st.expander("Ad Schedule", expanded=False):
        st.caption("Increase the daily budget from a day onward, or inject a one-time boost on a single day.")
        edited_lists["ad_schedule"] = st.data_editor(
            st.session_state["ad_schedule_master"],
            key="ad_schedule_editor",
            num_rows="dynamic",
            hide_index=True,
            column_config={
                "id": None,
                "day": st.column_config.NumberColumn("Day", min_value=1, step=1),
                "type": st.column_config.SelectboxColumn(
                    "Type", options=list(EVENT_TYPE_LABELS.keys()), help=", ".join(
                        f"{k}: {v}" for k, v in EVENT_TYPE_LABELS.items()
                    )
                ),
                "amount": st.column_config.NumberColumn("Amount", min_value=0.0, step=10.0),
            },
        )

    with st.expander("One-time Expenses", expanded=False):
        edited_lists["misc_one_time_costs"] = st.data_editor(
            st.session_state["misc_one_time_costs_master"],
            key="misc_one_time_costs_editor",
            num_rows="dynamic",
            hide_index=True,
            column_config={
                "id": None,
                "day": st.column_config.NumberColumn("Day", min_value=1, step=1),
                "amount": st.column_config.NumberColumn("Amount", min_value=0.0, step=10.0),
                "description": st.column_config.TextColumn("Description"),
            },
        )

    with st.expander("Fixed Monthly Costs", expanded=False):
        st.caption("Pro-rated over the campaign using a 30-day month.")
        edited_lists["fixed_monthly_costs"] = st.data_editor(
            st.session_state["fixed_monthly_costs_master"],
            key="fixed_monthly_costs_editor",
            num_rows="dynamic",
            hide_index=True,
            column_config={
                "id": None,
                "description": st.column_config.TextColumn("Description"),
                "amount": st.column_config.NumberColumn("Monthly Amount", min_value=0.0, step=50.0),
            },
        )


raw_assumptions = {k: deepcopy(st.session_state[k]) for k in SCALAR_KEYS}
raw_assumptions["logistics_timeline"] = {k: st.session_state[k] for k in TIMELINE_KEYS}
for k in LIST_KEYS:
    raw_assumptions[k] = edited_lists.get(k, st.session_state[f"{k}_master"])

assumptions, input_warnings, _unknown = migrate_assumptions(raw_assumptions)
input_warnings.extend(advisory_warnings(assumptions))
input_warnings = list(dict.fromkeys([w for w in input_warnings if str(w).strip()]))

currency = st.session_state["currency"]
symbol = CURRENCY_SYMBOLS.get(currency, "")


def _money(value: float) -> str:
    return format_currency(value, symbol)


assumptions_json = _serialize_assumptions(assumptions)
try:
    df, results = _run_model_cached(assumptions_json)
except Exception as exc:
    append_runtime_event(
        level="ERROR",
        event=EVENT_MODEL_RUN_FAILED,
        message="Simulation failed for the current inputs.",
        context={"assumptions": assumptions},
        exc=exc,
    )
    st.error(f"Simulation failed: {exc}")
    st.stop()

if input_warnings and st.session_state.get("_input_warning_log_signature") != _stable_json(input_warnings):
    log_warning_batch(EVENT_INPUT_WARNINGS, input_warnings, {"budget_duration": assumptions["budget_duration"]})
    st.session_state["_input_warning_log_signature"] = _stable_json(input_warnings)
elif not input_warnings:
    st.session_state["_input_warning_log_signature"] = ""

if input_warnings:
    with st.expander(f"[!] Input Warnings ({len(input_warnings)})", expanded=False):
        st.caption("Calculations continue using sanitized values where necessary.")
        for warning in input_warnings:
            st.write(f"- {warning}")

integrity_findings = run_integrity_checks(df, results, tol=1e-6)
_log_once(
    "_integrity_log_signature",
    integrity_findings,
    level="ERROR",
    event=EVENT_INTEGRITY_FAILED,
    message=f"{len(integrity_findings)} integrity check(s) failed.",
    context={"finding_count": len(integrity_findings), "findings": integrity_findings[:25]},
)
if integrity_findings:
    integrity_df = pd.DataFrame(integrity_findings)
    with st.expander(f"[!] Integrity Findings ({len(integrity_df)})", expanded=False):
        st.caption("Cash and funnel identities did not reconcile; treat outputs with caution.")
        st.dataframe(integrity_df, width="stretch", hide_index=True)
else:
    st.caption("Cash-flow integrity checks: passed.")

cf = results.cashflow

summary_tab, cashflow_tab, goal_tab, sens_tab, ai_tab, embed_tab = st.tabs(
    ["Summary Dashboard", "Cash Flow Timeline", "Goal Simulator", "Sensitivity", "AI Analysis", "Embed & Diagnostics"]
)

with summary_tab:
    st.subheader("Headline KPIs")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Net Profit", _money(results.net_profit), format_percent(results.net_margin) + " margin")
    c2.metric("Revenue", _money(results.revenue))
    c3.metric("ROAS", f"{results.roas:.2f}", f"Break-even {results.break_even_roas:.2f}", delta_color="off")
    c4.metric("ROI", format_percent(results.roi))

    d1, d2, d3, d4 = st.columns(4)
    d1.metric("Ad Spend", _money(results.total_ads))
    d2.metric("Cost per Purchase", _money(results.cost_per_purchase))
    d3.metric("Average Order Value", _money(results.average_order_value))
    d4.metric("RTO Loss", _money(results.rto_loss))

    st.subheader("Funnel")
    f1, f2, f3, f4, f5 = st.columns(5)
    f1.metric("Leads", f"{results.total_leads:,}")
    f2.metric("Orders", f"{results.total_orders:,}")
    f3.metric("Delivered", f"{results.delivered_orders:,}")
    f4.metric("RTO", f"{results.rto_orders:,}")
    f5.metric("Upsells Delivered", f"{results.delivered_upsell_orders:,}")
    if results.spend_implied_leads != results.total_leads:
        st.caption(
            f"Total ad spend buys {results.spend_implied_leads:,} leads at the flat cost per lead; "
            f"daily flooring yields {results.total_leads:,}."
        )

    breakdown = pd.DataFrame(
        [
            {"Component": "Ads", "Amount": results.total_ads, "color": CHART_COLORS["ads"]},
            {"Component": "Product Cost", "Amount": results.total_cogs, "color": CHART_COLORS["cogs"]},
            {"Component": "Shipping", "Amount": results.total_shipping, "color": CHART_COLORS["shipping"]},
            {"Component": "Misc", "Amount": results.total_misc, "color": CHART_COLORS["misc"]},
            {"Component": "Fixed", "Amount": results.total_fixed_costs, "color": CHART_COLORS["fixed"]},
            {"Component": "One-time", "Amount": results.total_one_time_misc, "color": CHART_COLORS["extras"]},
            {"Component": "Net Profit", "Amount": max(results.net_profit, 0.0), "color": CHART_COLORS["profit"]},
        ]
    )
    breakdown = breakdown[breakdown["Amount"] > 0]
    if breakdown.empty:
        st.info("No revenue or costs for the current inputs.")
    else:
        donut = px.pie(
            breakdown,
            names="Component",
            values="Amount",
            hole=0.55,
            color="Component",
            color_discrete_map=dict(zip(breakdown["Component"], breakdown["color"])),
            title="Where the revenue goes",
        )
        st.plotly_chart(donut, width="stretch")

    with st.expander("Uniform-flow snapshot vs daily simulation", expanded=False):
        snapshot = calculate_metrics(assumptions)
        comparison = pd.DataFrame(
            [
                {"Metric": "Leads", "Snapshot": snapshot["total_leads"], "Daily Simulation": results.total_leads},
                {"Metric": "Orders", "Snapshot": snapshot["total_orders"], "Daily Simulation": results.total_orders},
                {"Metric": "Delivered", "Snapshot": snapshot["delivered_orders"], "Daily Simulation": results.delivered_orders},
                {"Metric": "Revenue", "Snapshot": snapshot["revenue"], "Daily Simulation": results.revenue},
                {"Metric": "Net Profit", "Snapshot": snapshot["net_profit"], "Daily Simulation": results.net_profit},
            ]
        )
        st.dataframe(comparison, width="stretch", hide_index=True)
        st.caption("The snapshot pushes the whole budget through the funnel at once; the simulation rounds per day.")

with cashflow_tab:
    st.subheader("Cash cycle")
    k1, k2, k3, k4, k5 = st.columns(5)
    k1.metric("Working Capital Required", _money(cf.working_capital_required))
    k2.metric("Peak Capital Day", f"Day {cf.peak_capital_day}")
    k3.metric("Cash Break-even Day", f"Day {cf.roi_day}" if cf.roi_day is not None else "Not reached")
    k4.metric("Cash Cycle", f"{cf.total_cycle_days} days")
    k5.metric("Final Balance", _money(cf.net_cashflow))
    st.caption(
        f"A day-0 order is dispatched on day {cf.dispatch_day}, delivered on day {cf.delivery_day} "
        f"and paid out on day {cf.payout_day}. Base daily spend: {_money(cf.daily_spend_rate)}."
    )

    fig = go.Figure()
    fig.add_trace(go.Bar(x=df["Day"], y=-df["Total Outflow"], name="Outflow", marker_color=CHART_COLORS["loss"]))
    fig.add_trace(go.Bar(x=df["Day"], y=df["Total Inflow"], name="Inflow", marker_color=CHART_COLORS["profit"]))
    fig.add_trace(
        go.Scatter(
            x=df["Day"],
            y=df["Cumulative Balance"],
            name="Cumulative Balance",
            mode="lines",
            line=dict(color=CHART_COLORS["ads"], width=3),
        )
    )
    duration = int(df.attrs["budget_duration"])
    fig.add_vrect(x0=-0.5, x1=duration - 0.5, fillcolor="#94a3b8", opacity=0.08, line_width=0)
    fig.add_vline(x=cf.peak_capital_day, line_dash="dash", line_color=CHART_COLORS["loss"], annotation_text="Peak capital")
    if cf.roi_day is not None:
        fig.add_vline(x=cf.roi_day, line_dash="dot", line_color=CHART_COLORS["profit"], annotation_text="Break-even")
    fig.update_layout(
        title="Daily cash flow and cumulative balance",
        barmode="relative",
        xaxis_title="Day",
        yaxis_title=f"Amount ({currency})",
    )
    st.plotly_chart(fig, width="stretch")

    st.dataframe(df, width="stretch", hide_index=True)
    st.download_button(
        "Download Daily Cash Flow CSV",
        df.to_csv(index=False),
        file_name="cod_daily_cashflow.csv",
        mime="text/csv",
    )

with goal_tab:
    st.subheader("Goal Simulator")
    st.number_input(
        "Target Net Profit",
        step=500.0,
        key="goal_target_profit",
        help="Profit to reach after fixed and one-time costs.",
    )
    target_profit = float(st.session_state["goal_target_profit"])
    goal = compute_goal(assumptions, target_profit)

    g1, g2, g3, g4 = st.columns(4)
    g1.metric("Profit per Order", _money(goal.unit_profit))
    g2.metric("Required Orders", f"{goal.required_orders:,}")
    g3.metric("Required Leads", f"{goal.required_leads:,}")
    g4.metric("Required Ad Spend", _money(goal.required_ad_spend))
    if not goal.is_achievable:
        st.error("Each order loses money after acquisition cost; no volume reaches a positive profit target.")
    else:
        st.caption("Steady-state estimate: ignores per-day flooring and the cash timeline.")

    run_goal_seek = st.button(
        "Calibrate with daily simulation",
        disabled=not goal.is_achievable,
        help="Search the total budget whose simulated net profit reaches the target.",
    )
    if run_goal_seek:
        result = solve_ad_spend_for_profit(assumptions, target_profit)
        st.session_state["goal_seek_result"] = {
            "status": result.status,
            "value": result.value,
            "achieved": result.achieved,
            "message": result.message,
            "iterations": result.iterations,
            "target": target_profit,
            "signature": assumptions_json,
        }
        if result.status != "solved":
            append_runtime_event(
                level="WARNING",
                event=EVENT_GOAL_SEEK_FAILED,
                message=result.message,
                context={"target_profit": target_profit, "status": result.status, "iterations": result.iterations},
            )

    gs = st.session_state.get("goal_seek_result")
    if gs:
        if gs["status"] == "solved":
            st.success(
                f"Total budget {_money(gs['value'])} over {assumptions['budget_duration']} days reaches "
                f"{_money(gs['achieved'])} net profit ({gs['iterations']} iterations)."
            )
        else:
            st.warning(gs["message"])
        if gs.get("signature") != assumptions_json:
            st.caption("Inputs changed since this calibration; run it again to refresh.")

with sens_tab:
    st.subheader("One-way Sensitivity")
    driver_options = available_sensitivity_drivers(assumptions)
    st.session_state["sensitivity_drivers"] = [d for d in st.session_state["sensitivity_drivers"] if d in driver_options]
    s1, s2 = st.columns(2)
    s1.slider("Flex (+/- %)", min_value=1.0, max_value=50.0, step=1.0, key="sensitivity_delta_pct")
    s2.selectbox("Target", options=TARGET_OPTIONS, key="sensitivity_target")
    st.multiselect(
        "Drivers",
        options=driver_options,
        key="sensitivity_drivers",
        help=f"Leave empty to use: {', '.join(DEFAULT_SENSITIVITY_DRIVERS)}.",
    )
    delta = float(st.session_state["sensitivity_delta_pct"]) / 100.0
    sens_df = _run_sensitivity_cached(assumptions_json, delta, tuple(st.session_state["sensitivity_drivers"]))
    target = st.session_state["sensitivity_target"]
    if sens_df.empty:
        st.info("No numeric drivers selected.")
    else:
        tornado = sens_df.pivot(index="Driver", columns="Case", values=f"Delta {target}").reset_index()
        tornado["Range"] = (tornado["High"] - tornado["Low"]).abs()
        tornado = tornado.sort_values("Range")
        tfig = go.Figure()
        tfig.add_trace(go.Bar(y=tornado["Driver"], x=tornado["Low"], orientation="h", name="Low", marker_color=CHART_COLORS["loss"]))
        tfig.add_trace(go.Bar(y=tornado["Driver"], x=tornado["High"], orientation="h", name="High", marker_color=CHART_COLORS["profit"]))
        tfig.update_layout(title=f"Change in {target}", barmode="overlay", xaxis_title=f"Delta {target}")
        st.plotly_chart(tfig, width="stretch")
        st.dataframe(sens_df, width="stretch", hide_index=True)

with ai_tab:
    st.subheader("AI Analysis")
    st.caption("Sends the current inputs and results to the language model. Results above are unaffected by this call.")
    if st.button("Generate AI Insights", type="primary"):
        with st.spinner("Analyzing..."):
            narrative = request_narrative(assumptions, results, currency)
        st.session_state["narrative_result"] = {**asdict(narrative), "signature": assumptions_json}

    nr = st.session_state.get("narrative_result")
    if nr:
        if nr["status"] == "failed":
            st.error(nr["message"])
        else:
            if nr["status"] == "fallback":
                st.info(nr["message"])
            st.write(nr["analysis"])
            for i, tip in enumerate(nr["tips"], start=1):
                st.write(f"{i}. {tip}")
        if nr.get("signature") != assumptions_json:
            st.caption("Inputs changed since this analysis was generated.")

with embed_tab:
    st.subheader("Embed on your site")
    e1, e2 = st.columns([3, 1])
    app_url = e1.text_input("Hosted calculator URL", value=get_app_url())
    e2.number_input("Height (px)", min_value=300, max_value=3000, step=50, key="embed_height")
    st.code(generate_widget_code(app_url, int(st.session_state["embed_height"])), language="html")
    st.download_button(
        "Download WordPress Plugin",
        build_wordpress_plugin_zip(app_url, int(st.session_state["embed_height"])),
        file_name="cod-profit-calculator.zip",
        mime="application/zip",
    )

    st.subheader("Runtime Diagnostics")
    st.caption(f"Log file: {runtime_log_path()}")
    st.number_input("Events to show", min_value=10, max_value=1000, step=10, key="runtime_log_limit")
    events = read_runtime_events(int(st.session_state["runtime_log_limit"]))
    if events:
        counts = level_counts(events)
        st.caption(f"{counts['ERROR']} error(s), {counts['WARNING']} warning(s) in the last {len(events)} events.")
        st.dataframe(runtime_events_frame(events), width="stretch", hide_index=True)
    else:
        st.caption("No runtime events recorded.")
    st.button("Clear runtime log", on_click=clear_runtime_events)
