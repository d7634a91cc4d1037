"""Time entry arithmetic and per-technician hour rollups"""

from datetime import date, datetime
from typing import Iterable, Optional

from ...shared.serializers import isoformat


def calculate_duration(clock_in: datetime, clock_out: datetime, break_minutes: Optional[int] = 0) -> int:
    """Worked minutes, rounded to the nearest minute, net of breaks"""
    if clock_in.tzinfo is not None and clock_out.tzinfo is None:
        clock_in = clock_in.replace(tzinfo=None)
    elif clock_out.tzinfo is not None and clock_in.tzinfo is None:
        clock_out = clock_out.replace(tzinfo=None)
    elapsed = (clock_out - clock_in).total_seconds()
    return round(elapsed / 60) - (break_minutes or 0)


def summarize_technician_hours(
    work_orders: Iterable,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    technician_id: Optional[int] = None,
) -> list[dict]:
    """
    Roll work orders and their time entries up per technician.

    Unassigned work orders are ignored. Orders without a scheduled date are
    kept regardless of the date window.
    """
    summaries: dict[int, dict] = {}

    for work_order in work_orders:
        if not work_order.technician_id:
            continue
        if technician_id is not None and work_order.technician_id != technician_id:
            continue
        scheduled = work_order.scheduled_date
        if start_date and scheduled and scheduled < start_date:
            continue
        if end_date and scheduled and scheduled > end_date:
            continue

        summary = summaries.setdefault(
            work_order.technician_id,
            {
                "technicianId": work_order.technician_id,
                "totalMinutes": 0,
                "completedOrders": 0,
                "activeOrders": 0,
                "maintenanceVisits": 0,
                "workOrders": 0,
                "entries": [],
            },
        )

        if work_order.status == "completed":
            summary["completedOrders"] += 1
        if work_order.status == "in_progress":
            summary["activeOrders"] += 1
        if work_order.maintenance_order_id:
            summary["maintenanceVisits"] += 1
        else:
            summary["workOrders"] += 1

        for entry in work_order.time_entries:
            if entry.duration:
                summary["totalMinutes"] += entry.duration
            summary["entries"].append(
                {
                    "workOrderId": work_order.id,
                    "workOrderTitle": work_order.title,
                    "date": isoformat(scheduled),
                    "duration": entry.duration,
                    "clockIn": isoformat(entry.clock_in),
                    "clockOut": isoformat(entry.clock_out),
                }
            )

    return list(summaries.values())
