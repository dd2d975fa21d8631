#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Renewal tracker (SQLite)

Commands:
  init                Create tables and default config
  add-client          Add a client
  add-service         Add a service
  add-renewal         Add a renewal for a client/service
  mark-paid           Mark a renewal as paid
  notify              Record that the renewal notification went out
  delete-renewal      Delete a renewal
  upcoming            Print renewals ending in the next N days
  stats               Print dashboard KPIs
  monthly             Print paid revenue for the last N months
  activities          Print the most recent activity log entries
  report              Export upcoming renewals and monthly revenue (CSV)

Notes:
- DB location comes from RENEWAL_DB_PATH or config.yaml (db_path).
- Renewal writes are recorded in the activity log (see `activities`).
"""

import argparse
import datetime as dt
import logging
import os
import sys

import pandas as pd

from renewal_backend.db import ensure_schema
from renewal_backend.errors import StorageError
from renewal_backend.services import activity_svc, client_svc, dashboard_svc, renewal_svc, service_svc
from renewal_backend.services.config_svc import ensure_default_config


def _date_arg(s: str) -> dt.date:
    try:
        return dt.date.fromisoformat(s)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {s!r}")


def _print_frame(title: str, rows: list[dict], empty: str = "(empty)"):
    print(f"\n=== {title} ===")
    if rows:
        print(pd.DataFrame(rows))
    else:
        print(empty)


# ---------------- Commands ----------------

def cmd_init(args):
    ensure_schema()
    ensure_default_config()
    print("DB initialized.")


def cmd_add_client(args):
    data = {
        "name": args.name,
        "email": args.email,
        "phone": args.phone,
        "company": args.company,
        "address": args.address,
        "gst": args.gst,
        "notes": args.notes,
    }
    c = client_svc.create_client(data)
    print("Client created:", c["id"])


def cmd_add_service(args):
    data = {
        "name": args.name,
        "description": args.description,
        "default_price": args.price,
        "default_duration": args.duration,
    }
    s = service_svc.create_service(data)
    print("Service created:", s["id"])


def cmd_add_renewal(args):
    service = service_svc.get_service(args.service_id)
    if service is None:
        raise SystemExit("Unknown service")
    start = args.start or dt.date.today()
    data = {
        "client_id": args.client_id,
        "service_id": args.service_id,
        "start_date": start,
        "end_date": args.end,
        "amount": args.amount if args.amount is not None else service["default_price"],
        "is_paid": args.paid,
        "notes": args.notes,
    }
    r = renewal_svc.create_renewal(data)
    print("Renewal created:", r["id"], "ending", r["end_date"])


def cmd_mark_paid(args):
    data = {"is_paid": True}
    if args.amount is not None:
        data["amount"] = args.amount
    r = renewal_svc.update_renewal(args.id, data)
    if r is None:
        raise SystemExit("Renewal not found")
    print("Renewal", r["id"], "marked paid.")


def cmd_notify(args):
    r = renewal_svc.set_notification_status(args.id, not args.clear)
    if r is None:
        raise SystemExit("Renewal not found")
    print("Renewal", r["id"], "notification_sent =", r["is_notified"])


def cmd_delete_renewal(args):
    if not renewal_svc.delete_renewal(args.id):
        raise SystemExit("Renewal not found")
    print("Renewal", args.id, "deleted.")


def cmd_upcoming(args):
    rows = renewal_svc.list_upcoming_renewals(args.days)
    _print_frame("Upcoming Renewals", [
        {
            "id": r["id"],
            "client": r["client"]["name"],
            "service": r["service"]["name"],
            "end_date": r["end_date"],
            "amount": r["amount"],
            "paid": r["is_paid"],
            "notified": r["notification_sent"],
        }
        for r in rows
    ], empty="(none)")


def cmd_stats(args):
    stats = dashboard_svc.get_dashboard_stats()
    print("\n=== Dashboard ===")
    for k, v in stats.items():
        print(f"{k:<20}{v}")


def cmd_monthly(args):
    _print_frame("Monthly Revenue", dashboard_svc.get_monthly_revenue(args.months))


def cmd_activities(args):
    _print_frame("Activities", activity_svc.list_activities(args.limit), empty="(none)")


def cmd_report(args):
    paths = dashboard_svc.export_report(args.out)
    for p in paths.values():
        print("CSV exported to", p)


# ---------------- Entry ----------------

def main(argv=None):
    parser = argparse.ArgumentParser(description="Renewal tracker (SQLite)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers()

    p_init = sub.add_parser("init", help="create tables and default config")
    p_init.set_defaults(func=cmd_init)

    p_cli = sub.add_parser("add-client", help="add a client")
    p_cli.add_argument("--name", required=True)
    p_cli.add_argument("--email", required=True)
    p_cli.add_argument("--phone")
    p_cli.add_argument("--company")
    p_cli.add_argument("--address")
    p_cli.add_argument("--gst")
    p_cli.add_argument("--notes")
    p_cli.set_defaults(func=cmd_add_client)

    p_svc = sub.add_parser("add-service", help="add a service")
    p_svc.add_argument("--name", required=True)
    p_svc.add_argument("--description")
    p_svc.add_argument("--price", required=True, type=float)
    p_svc.add_argument("--duration", required=True, type=int, help="months")
    p_svc.set_defaults(func=cmd_add_service)

    p_ren = sub.add_parser("add-renewal", help="add a renewal")
    p_ren.add_argument("--client-id", required=True, type=int)
    p_ren.add_argument("--service-id", required=True, type=int)
    p_ren.add_argument("--start", type=_date_arg, help="YYYY-MM-DD (default today)")
    p_ren.add_argument("--end", required=True, type=_date_arg, help="YYYY-MM-DD")
    p_ren.add_argument("--amount", type=float, help="default: service default price")
    p_ren.add_argument("--paid", action="store_true")
    p_ren.add_argument("--notes")
    p_ren.set_defaults(func=cmd_add_renewal)

    p_paid = sub.add_parser("mark-paid", help="mark a renewal as paid")
    p_paid.add_argument("id", type=int)
    p_paid.add_argument("--amount", type=float)
    p_paid.set_defaults(func=cmd_mark_paid)

    p_ntf = sub.add_parser("notify", help="record notification status")
    p_ntf.add_argument("id", type=int)
    p_ntf.add_argument("--clear", action="store_true", help="reset to not sent")
    p_ntf.set_defaults(func=cmd_notify)

    p_del = sub.add_parser("delete-renewal", help="delete a renewal")
    p_del.add_argument("id", type=int)
    p_del.set_defaults(func=cmd_delete_renewal)

    p_up = sub.add_parser("upcoming", help="renewals ending soon")
    p_up.add_argument("--days", type=int, help="default from config (30)")
    p_up.set_defaults(func=cmd_upcoming)

    p_st = sub.add_parser("stats", help="dashboard KPIs")
    p_st.set_defaults(func=cmd_stats)

    p_mon = sub.add_parser("monthly", help="paid revenue by month")
    p_mon.add_argument("--months", type=int, help="default from config (6)")
    p_mon.set_defaults(func=cmd_monthly)

    p_act = sub.add_parser("activities", help="recent activity log")
    p_act.add_argument("--limit", type=int, default=20)
    p_act.set_defaults(func=cmd_activities)

    p_rep = sub.add_parser("report", help="export CSV report")
    p_rep.add_argument("--out", default=os.path.join(os.getcwd(), "exports"))
    p_rep.set_defaults(func=cmd_report)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    pd.set_option("display.max_rows", 200)
    pd.set_option("display.width", 160)
    if hasattr(args, "func"):
        try:
            args.func(args)
        except (StorageError, ValueError) as e:
            raise SystemExit(f"[ERROR] {e}")
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
