"""
utils/attendance_sync.py
-----------------
Daily attendance upserts and the per-mentee summary kept on each mentee
document (attendance.total_days / present_days / percentage).

The summary is always recomputed from the attendances collection with two
count queries, so replaying a save leaves the same numbers behind.
"""

import calendar
import logging
from datetime import datetime

from models import Attendance, Mentee, STATUSES
from utils.helpers import parse_date, round_half_up, to_object_id

logger = logging.getLogger(__name__)


def attendance_percentage(present_days, total_days):
    if not total_days:
        return 0
    return round_half_up(present_days / total_days * 100)


def recompute_mentee_attendance(mentee_id):
    total_days = Attendance.count_for(mentee_id)
    present_days = Attendance.count_for(mentee_id, status="present")
    summary = {
        "total_days": total_days,
        "present_days": present_days,
        "percentage": attendance_percentage(present_days, total_days),
    }

    Mentee.collection().update_one(
        {"_id": mentee_id},
        {"$set": {
            "attendance.total_days": summary["total_days"],
            "attendance.present_days": summary["present_days"],
            "attendance.percentage": summary["percentage"],
            "updated_at": datetime.utcnow(),
        }}
    )
    return summary


def _pending_marks(date_key, attendance_data):
    """Validate the whole payload up front so a bad entry writes nothing."""
    if not isinstance(attendance_data, dict):
        raise ValueError("attendance_data must be an object keyed by mentee id")

    marks = []
    for mentee_key, days in attendance_data.items():
        if not isinstance(days, dict):
            raise ValueError(f"Attendance for mentee {mentee_key} must be an object keyed by date")
        status = days.get(date_key)
        if not status:
            continue
        if status not in STATUSES:
            raise ValueError(f"Invalid attendance status '{status}' for mentee {mentee_key}")
        mentee_id = to_object_id(mentee_key)
        if mentee_id is None:
            raise ValueError(f"Invalid mentee id: {mentee_key}")
        marks.append((mentee_key, mentee_id, status))
    return marks


def save_attendance(date, attendance_data, marked_by):
    """
    Upsert one attendance record per mentee for the given date and refresh
    the mentee's summary.

    attendance_data example:
    {
        "665f1c...": {"2024-06-03": "present"},
        "665f1d...": {"2024-06-03": "absent"}
    }
    Entries without a status for the date are ignored.
    """
    day = parse_date(date)
    marks = _pending_marks(date, attendance_data)

    saved, skipped = {}, []
    for mentee_key, mentee_id, status in marks:
        if not Mentee.find_by_id(mentee_id):
            logger.warning("Skipping attendance for unknown mentee %s", mentee_key)
            skipped.append(mentee_key)
            continue

        Attendance(mentee_id=mentee_id, date=day, status=status, marked_by=marked_by).upsert()
        saved[mentee_key] = recompute_mentee_attendance(mentee_id)

    logger.info("Attendance for %s saved for %s mentees (%s skipped)", day, len(saved), len(skipped))
    return {"saved": saved, "skipped": skipped}


def recompute_all():
    """Rebuild the summary of every mentee from its attendance records."""
    results = []
    for mentee in Mentee.collection().find({}, {"full_name": 1}):
        summary = recompute_mentee_attendance(mentee["_id"])
        logger.info(
            "Updated %s: %s/%s (%s%%)",
            mentee.get("full_name"), summary["present_days"], summary["total_days"], summary["percentage"]
        )
        results.append((mentee, summary))
    return results


# ==========================================================
# READ SIDE
# ==========================================================
def _all_mentee_ids():
    return [m["_id"] for m in Mentee.collection().find({}, {"_id": 1})]


def attendance_for_date(date):
    date = parse_date(date)
    records = Attendance.collection().find({"date": date})
    by_mentee = {rec["mentee_id"]: rec["status"] for rec in records}

    return {
        str(mentee_id): {date: by_mentee.get(mentee_id)}
        for mentee_id in _all_mentee_ids()
    }


def month_days(month, year):
    days_in_month = calendar.monthrange(year, month)[1]
    return [f"{year:04d}-{month:02d}-{day:02d}" for day in range(1, days_in_month + 1)]


def attendance_for_month(month, year):
    if not 1 <= month <= 12:
        raise ValueError("month must be between 1 and 12")
    days = month_days(month, year)

    records = Attendance.collection().find({"date": {"$gte": days[0], "$lte": days[-1]}})
    lookup = {(rec["mentee_id"], rec["date"]): rec["status"] for rec in records}

    return {
        str(mentee_id): {day: lookup.get((mentee_id, day)) for day in days}
        for mentee_id in _all_mentee_ids()
    }


def mentee_attendance_stats(mentee_id, start_date=None, end_date=None):
    query = {"mentee_id": mentee_id}
    if start_date and end_date:
        query["date"] = {"$gte": parse_date(start_date), "$lte": parse_date(end_date)}

    records = list(Attendance.collection().find(query).sort("date", 1))
    total_days = len(records)
    present_days = sum(1 for r in records if r["status"] == "present")
    absent_days = sum(1 for r in records if r["status"] == "absent")

    return {
        "total_days": total_days,
        "present_days": present_days,
        "absent_days": absent_days,
        "percentage": attendance_percentage(present_days, total_days),
        "records": records,
    }
