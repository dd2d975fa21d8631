from __future__ import annotations

# renewal_backend/services/dashboard_svc.py
import os
from datetime import date

import pandas as pd

from ..db import get_conn
from ..errors import store_errors
from ..repository import client_repo, reporting_repo, service_repo
from .config_svc import get_config
from .renewal_svc import list_upcoming_renewals
from .utils import add_days, add_months, month_bounds, month_label, to_dash, today


def get_dashboard_stats(on_date: date | None = None) -> dict:
    """
    Dashboard KPIs, computed fresh on every call:
    - total_revenue: paid amounts, all time
    - upcoming_renewals: end_date in [today, today + upcoming_days]
    - overdue_renewals: end_date < today and unpaid
    - revenue_ytd: paid amounts with end_date >= Jan 1 of this year
    - projected_revenue: any amount with end_date in [today, today + projection_months]
    Empty sums come back as 0, never None.
    """
    d = on_date or today()
    cfg = get_config()
    d_dash = to_dash(d)
    upcoming_end = to_dash(add_days(d, cfg["upcoming_days"]))
    projection_end = to_dash(add_months(d, cfg["projection_months"]))
    year_start = to_dash(date(d.year, 1, 1))

    with store_errors("fetching dashboard stats"), get_conn() as conn:
        return {
            "total_clients": client_repo.count_all(conn),
            "total_services": service_repo.count_all(conn),
            "total_revenue": reporting_repo.sum_paid(conn),
            "upcoming_renewals": reporting_repo.count_end_between(conn, d_dash, upcoming_end),
            "overdue_renewals": reporting_repo.count_overdue(conn, d_dash),
            "revenue_ytd": reporting_repo.sum_paid(conn, year_start),
            "projected_revenue": reporting_repo.sum_end_between(conn, d_dash, projection_end),
        }


def get_monthly_revenue(months: int | None = None, on_date: date | None = None) -> list[dict]:
    """
    Paid revenue per calendar month for the last `months` months, current month
    included, oldest first: [{"month": "May 2026", "amount": 0.0}, ...]
    """
    if months is None:
        months = get_config()["revenue_months"]
    if months <= 0:
        return []
    d = on_date or today()
    periods = [add_months(d.replace(day=1), -i) for i in range(months - 1, -1, -1)]
    first, _ = month_bounds(periods[0])
    _, last = month_bounds(periods[-1])

    with store_errors(f"fetching monthly revenue for last {months} months"), get_conn() as conn:
        rows = reporting_repo.paid_amounts_between(conn, to_dash(first), to_dash(last))
    df = pd.DataFrame([dict(r) for r in rows], columns=["end_date", "amount"])

    if df.empty:
        totals = {}
    else:
        df["month"] = df["end_date"].astype(str).str.slice(0, 7)
        totals = df.groupby("month")["amount"].sum().to_dict()

    return [
        {"month": month_label(p), "amount": float(totals.get(p.strftime("%Y-%m"), 0.0))}
        for p in periods
    ]


def export_report(out_dir: str, on_date: date | None = None) -> dict:
    """Write upcoming renewals and monthly revenue as CSV; returns the file paths."""
    d = on_date or today()
    stamp = d.strftime("%Y%m%d")
    os.makedirs(out_dir, exist_ok=True)

    upcoming = pd.DataFrame([
        {
            "id": r["id"],
            "client": r["client"]["name"],
            "company": r["client"]["company"],
            "service": r["service"]["name"],
            "end_date": r["end_date"],
            "amount": r["amount"],
            "is_paid": r["is_paid"],
            "notification_sent": r["notification_sent"],
        }
        for r in list_upcoming_renewals(on_date=d)
    ], columns=["id", "client", "company", "service", "end_date", "amount", "is_paid", "notification_sent"])
    monthly = pd.DataFrame(get_monthly_revenue(on_date=d), columns=["month", "amount"])

    paths = {
        "upcoming": os.path.join(out_dir, f"upcoming_{stamp}.csv"),
        "monthly": os.path.join(out_dir, f"monthly_revenue_{stamp}.csv"),
    }
    upcoming.to_csv(paths["upcoming"], index=False, encoding="utf-8-sig")
    monthly.to_csv(paths["monthly"], index=False, encoding="utf-8-sig")
    return paths
