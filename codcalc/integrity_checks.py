"""Funnel and cash-timeline integrity checks."""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd


def _finding(
    check: str,
    max_abs_delta: float,
    day: str,
    lhs_name: str,
    rhs_name: str,
) -> dict[str, Any]:
    return {
        "Check": check,
        "Max Abs Delta": float(max_abs_delta),
        "Day of Max Delta": day,
        "LHS": lhs_name,
        "RHS": rhs_name,
    }


def _day_of_max_delta(df: pd.DataFrame, delta: np.ndarray) -> str:
    if len(delta) == 0:
        return ""
    idx = int(np.argmax(np.abs(delta)))
    if "Day" in df.columns and idx < len(df):
        return str(int(df.iloc[idx]["Day"]))
    return str(idx)


def _check_series_identity(
    findings: list[dict[str, Any]],
    df: pd.DataFrame,
    check_name: str,
    lhs_name: str,
    rhs_name: str,
    lhs: np.ndarray,
    rhs: np.ndarray,
    tol: float,
) -> None:
    delta = np.nan_to_num(np.asarray(lhs, dtype=float) - np.asarray(rhs, dtype=float), nan=0.0)
    if len(delta) == 0:
        return
    max_abs = float(np.max(np.abs(delta)))
    if max_abs > float(tol):
        findings.append(_finding(check_name, max_abs, _day_of_max_delta(df, delta), lhs_name, rhs_name))


def _check_scalar_identity(
    findings: list[dict[str, Any]],
    check_name: str,
    lhs_name: str,
    rhs_name: str,
    lhs: float,
    rhs: float,
    tol: float,
) -> None:
    delta = abs(float(lhs) - float(rhs))
    if delta > float(tol):
        findings.append(_finding(check_name, delta, "", lhs_name, rhs_name))


def run_integrity_checks(df: pd.DataFrame, results=None, tol: float = 1e-6) -> list[dict[str, Any]]:
    """Return integrity findings (empty list means all checks passed).

    ``results`` is an optional ``Results`` record computed from the same inputs; when
    given, its totals are reconciled against the frame.
    """
    if not isinstance(df, pd.DataFrame) or df.empty:
        return [{"Check": "Dataframe not available", "Max Abs Delta": np.nan, "Day of Max Delta": "", "LHS": "", "RHS": ""}]

    findings: list[dict[str, Any]] = []

    # Cash identities.
    _check_series_identity(
        findings,
        df,
        "Outflow identity",
        "Total Outflow",
        "Fixed + One-time Misc + Ad Spend + Fulfillment",
        df["Total Outflow"].to_numpy(),
        (df["Fixed Cost"] + df["One-time Misc Cost"] + df["Ad Spend"] + df["Fulfillment Cost"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Payout identity",
        "Payout Revenue",
        "Gross Payout - Payout Shipping",
        df["Payout Revenue"].to_numpy(),
        (df["Gross Payout"] - df["Payout Shipping"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Net cash flow identity",
        "Net Cash Flow",
        "Total Inflow - Total Outflow",
        df["Net Cash Flow"].to_numpy(),
        (df["Total Inflow"] - df["Total Outflow"]).to_numpy(),
        tol,
    )
    balance = df["Cumulative Balance"].to_numpy(dtype=float)
    _check_series_identity(
        findings,
        df,
        "Cumulative balance roll-forward",
        "Cumulative Balance[t]",
        "Cumulative Balance[t-1] + Net Cash Flow[t]",
        balance,
        np.insert(balance[:-1], 0, 0.0) + df["Net Cash Flow"].to_numpy(dtype=float),
        tol,
    )
    _check_scalar_identity(
        findings,
        "Cash conservation",
        "Final Cumulative Balance",
        "-(sum Total Outflow - sum Total Inflow)",
        float(balance[-1]),
        -(float(df["Total Outflow"].sum()) - float(df["Total Inflow"].sum())),
        tol,
    )

    # Funnel splits.
    _check_series_identity(
        findings,
        df,
        "Order split",
        "Orders",
        "Delivered Orders + RTO Orders",
        df["Orders"].to_numpy(),
        (df["Delivered Orders"] + df["RTO Orders"]).to_numpy(),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Delivered within orders",
        "max(Delivered Orders - Orders, 0)",
        "0",
        np.maximum(df["Delivered Orders"].to_numpy() - df["Orders"].to_numpy(), 0.0),
        np.zeros(len(df)),
        tol,
    )
    _check_series_identity(
        findings,
        df,
        "Delivered upsell within upsell orders",
        "max(Delivered Upsell Orders - Upsell Orders, 0)",
        "0",
        np.maximum(df["Delivered Upsell Orders"].to_numpy() - df["Upsell Orders"].to_numpy(), 0.0),
        np.zeros(len(df)),
        tol,
    )

    if results is not None:
        _check_scalar_identity(
            findings, "Ad spend total", "Results.total_ads", "sum Ad Spend", results.total_ads, df["Ad Spend"].sum(), tol
        )
        _check_scalar_identity(
            findings, "Order total", "Results.total_orders", "sum Orders", results.total_orders, df["Orders"].sum(), tol
        )
        _check_scalar_identity(
            findings,
            "Delivered total",
            "Results.delivered_orders",
            "sum Delivered Orders",
            results.delivered_orders,
            df["Delivered Orders"].sum(),
            tol,
        )
        _check_scalar_identity(
            findings,
            "Final balance",
            "Results.cashflow.net_cashflow",
            "final Cumulative Balance",
            results.cashflow.net_cashflow,
            balance[-1],
            tol,
        )

    return findings
