from flask import Blueprint, current_app, g, jsonify, request

from models import Mentee
from utils.attendance_sync import (
    attendance_for_date,
    attendance_for_month,
    mentee_attendance_stats,
    save_attendance,
)
from utils.auth import admin_required
from utils.reports import EXPORTERS, monthly_attendance_rows

attendance_bp = Blueprint("attendance", __name__, url_prefix="/api/admin/attendance")


# ==========================================================
# VIEW ATTENDANCE (single date or whole month)
# ==========================================================
@attendance_bp.route("", methods=["GET"])
@admin_required
def get_attendance():
    date = request.args.get("date")
    month = request.args.get("month", type=int)
    year = request.args.get("year", type=int)

    try:
        if date:
            return jsonify(attendance_for_date(date))
        if month and year:
            return jsonify(attendance_for_month(month, year))
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    return jsonify({"message": "Provide either date or month and year"}), 400


# ==========================================================
# SAVE ATTENDANCE
# ==========================================================
@attendance_bp.route("", methods=["POST"])
@admin_required
def post_attendance():
    payload = request.get_json(silent=True) or {}
    date = payload.get("date")
    if not date:
        return jsonify({"message": "date is required"}), 400

    try:
        result = save_attendance(date, payload.get("attendance_data") or {}, g.current_user["_id"])
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    return jsonify({
        "message": "Attendance saved successfully",
        "saved": result["saved"],
        "skipped": result["skipped"],
    })


# ==========================================================
# PER-MENTEE STATS
# ==========================================================
@attendance_bp.route("/stats/<ObjectId:mentee_id>")
@admin_required
def mentee_stats(mentee_id):
    if not Mentee.find_by_id(mentee_id):
        return jsonify({"message": "Mentee not found"}), 404

    try:
        stats = mentee_attendance_stats(
            mentee_id,
            start_date=request.args.get("start_date"),
            end_date=request.args.get("end_date"),
        )
    except ValueError as e:
        return jsonify({"message": str(e)}), 400

    return jsonify(stats)


# ==========================================================
# EXPORT MONTHLY REPORT (csv / xlsx / pdf)
# ==========================================================
@attendance_bp.route("/export")
@admin_required
def export_attendance():
    month = request.args.get("month", type=int)
    year = request.args.get("year", type=int)
    export_type = (request.args.get("format") or "csv").lower()

    if not month or not year or not 1 <= month <= 12:
        return jsonify({"message": "Valid month and year are required"}), 400

    exporter = EXPORTERS.get(export_type)
    if not exporter:
        return jsonify({"message": f"Unsupported export format: {export_type}"}), 400

    records = monthly_attendance_rows(month, year)
    current_app.logger.info("Exporting %s attendance rows for %02d/%s as %s",
                            len(records), month, year, export_type)
    return exporter(
        f"Attendance Report - {month:02d}/{year}",
        records,
        f"attendance_{year}_{month:02d}",
    )
