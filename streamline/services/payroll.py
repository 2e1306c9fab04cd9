"""
Payroll aggregation over closed shifts.

Endpoints fetch every timesheet for a period in **one** query, wrap the rows
in :class:`WorkedShift` and aggregate here in Python.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from streamline.core.timeutils import hours_between


@dataclass
class WorkedShift:
    timesheet_id: int
    staff_id: int
    staff_name: str
    job_name: str | None
    pay_rate: float
    clock_in: datetime
    clock_out: datetime | None
    clock_in_latitude: float | None = None
    clock_in_longitude: float | None = None
    clock_out_latitude: float | None = None
    clock_out_longitude: float | None = None

    @property
    def hours(self) -> float:
        """Worked hours; open shifts count as zero until clocked out."""
        if self.clock_out is None:
            return 0.0
        return hours_between(self.clock_in, self.clock_out)

    @property
    def wage(self) -> float:
        return self.hours * (self.pay_rate or 0.0)


def format_location(latitude: float | None, longitude: float | None) -> str:
    if latitude is None or longitude is None:
        return ""
    return f"{latitude:.6f}, {longitude:.6f}"


def calculate_payroll(shifts: Iterable[WorkedShift]) -> list[dict]:
    """One line per staff member: hours, rate and wage, sorted by name."""
    hours: dict[int, float] = defaultdict(float)
    wages: dict[int, float] = defaultdict(float)
    names: dict[int, str] = {}
    rates: dict[int, float] = {}

    for shift in shifts:
        if shift.clock_out is None:
            continue
        hours[shift.staff_id] += shift.hours
        wages[shift.staff_id] += shift.wage
        names[shift.staff_id] = shift.staff_name
        rates[shift.staff_id] = shift.pay_rate

    lines = [
        {
            "staff_id": staff_id,
            "full_name": names[staff_id],
            "total_hours": round(hours[staff_id], 2),
            "pay_rate": rates[staff_id],
            "total_wage": round(wages[staff_id], 2),
        }
        for staff_id in hours
    ]
    lines.sort(key=lambda line: (line["full_name"].lower(), line["staff_id"]))
    return lines


def summarize_day(shifts: Iterable[WorkedShift]) -> dict:
    """Totals for a single day: hours, labour cost, distinct staff and jobs."""
    total_hours = 0.0
    total_cost = 0.0
    staff: set[int] = set()
    jobs: list[str] = []

    for shift in shifts:
        staff.add(shift.staff_id)
        if shift.job_name and shift.job_name not in jobs:
            jobs.append(shift.job_name)
        total_hours += shift.hours
        total_cost += shift.wage

    return {
        "total_hours": round(total_hours, 2),
        "total_cost": round(total_cost, 2),
        "staff_count": len(staff),
        "jobs_worked": jobs,
    }


def detailed_entries(shifts: Iterable[WorkedShift]) -> list[dict]:
    return [
        {
            "timesheet_id": s.timesheet_id,
            "staff_id": s.staff_id,
            "staff_name": s.staff_name,
            "job_name": s.job_name,
            "clock_in": s.clock_in,
            "clock_out": s.clock_out,
            "total_hours": round(s.hours, 2),
            "pay_rate": s.pay_rate,
            "total_wage": round(s.wage, 2),
            "clock_in_location": format_location(s.clock_in_latitude, s.clock_in_longitude),
            "clock_out_location": format_location(s.clock_out_latitude, s.clock_out_longitude),
        }
        for s in shifts
    ]
