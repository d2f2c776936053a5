"""Payroll estimates from closed check-ins.

Regular pay at the user's hourly rate, overtime at the policy multiplier and a
flat policy tax rate. This is an estimate for planning, not a payslip.
"""
from datetime import date
from typing import Optional

from policy import get_policy
from timeclock import hours_worked


def _money(value: float) -> float:
    return round(value, 2)


def estimate_payroll(db, start_date: Optional[date] = None, end_date: Optional[date] = None) -> dict:
    policy = get_policy(db)
    overtime_rate = float(policy["overtime_rate"])
    tax_rate = float(policy["tax_rate"])

    entries = []
    for user in db.users.find(sort="username"):
        checkins = [
            c for c in db.checkins.find({"user_id": user["id"]})
            if c.get("check_out_time") is not None
            and (start_date is None or c["check_in_time"].date() >= start_date)
            and (end_date is None or c["check_in_time"].date() <= end_date)
        ]
        if not checkins:
            continue

        worked = sum(max(0.0, hours_worked(c) - (c.get("break_duration") or 0) / 60) for c in checkins)
        overtime = sum((c.get("overtime_minutes") or 0) for c in checkins) / 60
        regular = max(0.0, worked - overtime)
        rate = float(user.get("hourly_rate") or 0)

        regular_pay = regular * rate
        overtime_pay = overtime * rate * overtime_rate
        gross = regular_pay + overtime_pay
        taxes = gross * tax_rate / 100
        entries.append(
            {
                "user_id": user["id"],
                "name": f"{user['first_name']} {user['last_name']}",
                "regular_hours": round(regular, 2),
                "overtime_hours": round(overtime, 2),
                "hourly_rate": rate,
                "regular_pay": _money(regular_pay),
                "overtime_pay": _money(overtime_pay),
                "gross_pay": _money(gross),
                "taxes": _money(taxes),
                "net_pay": _money(gross - taxes),
            }
        )

    totals = {
        "total_regular_hours": round(sum(e["regular_hours"] for e in entries), 2),
        "total_overtime_hours": round(sum(e["overtime_hours"] for e in entries), 2),
        "total_gross_pay": _money(sum(e["gross_pay"] for e in entries)),
        "total_taxes": _money(sum(e["taxes"] for e in entries)),
        "total_net_pay": _money(sum(e["net_pay"] for e in entries)),
    }
    return {
        "start_date": start_date.isoformat() if start_date else None,
        "end_date": end_date.isoformat() if end_date else None,
        "currency": policy["currency"],
        "entries": entries,
        "totals": totals,
    }
