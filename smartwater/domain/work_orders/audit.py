"""Field-level change tracking for work orders"""

import json
import re

# Request field -> column
TRACKED_FIELDS = {
    "title": "title",
    "description": "description",
    "category": "category",
    "status": "status",
    "priority": "priority",
    "scheduledDate": "scheduled_date",
    "technicianId": "technician_id",
    "projectId": "project_id",
    "projectPhaseId": "project_phase_id",
    "checklist": "checklist",
    "notes": "notes",
}


def audit_value(value) -> str:
    """String form used for comparison; None and empty are the same"""
    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, sort_keys=True)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def field_label(field: str) -> str:
    """scheduledDate -> 'scheduled date'"""
    return re.sub(r"([A-Z])", r" \1", field).lower()


def describe_change(field: str, old_value, new_value) -> tuple[str, str]:
    """Return (action, description) for one changed field"""
    if field == "status":
        return "status_changed", f'Status changed from "{old_value or "none"}" to "{new_value}"'
    if field == "technicianId":
        return "assigned", "Technician assigned" if new_value else "Technician unassigned"
    if field == "checklist":
        return "checklist_updated", "Checklist updated"
    return "updated", f"Changed {field_label(field)}"


def diff_work_order(work_order, changes: dict) -> list[dict]:
    """
    Audit entries for the tracked fields present in changes.

    changes maps request field names to their new values; fields that
    were not sent are ignored.
    """
    entries = []
    for field, column in TRACKED_FIELDS.items():
        if field not in changes:
            continue
        old_value = getattr(work_order, column)
        new_value = changes[field]
        old_str = audit_value(old_value)
        new_str = audit_value(new_value)
        if old_str == new_str:
            continue

        action, description = describe_change(field, old_str, new_str)
        entries.append(
            {
                "action": action,
                "field_name": field,
                "old_value": old_str or None,
                "new_value": new_str or None,
                "description": description,
            }
        )
    return entries
