import csv
import os
import time

from flask import Blueprint, current_app, jsonify, make_response, request
from werkzeug.utils import secure_filename

from utils.auth import admin_required
from utils.csv_import import import_students, template_csv

csv_bp = Blueprint("csv", __name__, url_prefix="/api/csv")


def _is_csv(file_storage):
    return (file_storage.mimetype == "text/csv"
            or file_storage.filename.lower().endswith(".csv"))


# ==========================================================
# UPLOAD STUDENTS
# ==========================================================
@csv_bp.route("/upload-students", methods=["POST"])
@admin_required
def upload_students():
    # older clients post the field as csvFile
    file = request.files.get("csv_file") or request.files.get("csvFile")
    if not file or not file.filename:
        return jsonify({"message": "No file uploaded"}), 400

    if not _is_csv(file):
        return jsonify({"message": "Only CSV files are allowed"}), 400

    upload_dir = current_app.config["UPLOAD_FOLDER"]
    os.makedirs(upload_dir, exist_ok=True)
    path = os.path.join(upload_dir, f"{int(time.time() * 1000)}-{secure_filename(file.filename)}")
    file.save(path)

    try:
        report = import_students(path)
    except (csv.Error, ValueError) as e:
        current_app.logger.error("CSV parsing error: %s", e)
        return jsonify({"message": "Error parsing CSV file", "error": str(e)}), 400
    finally:
        if os.path.exists(path):
            os.remove(path)

    return jsonify(report.to_dict())


# ==========================================================
# TEMPLATE DOWNLOAD
# ==========================================================
@csv_bp.route("/template")
@admin_required
def template():
    resp = make_response(template_csv())
    resp.headers["Content-Type"] = "text/csv; charset=utf-8"
    resp.headers["Content-Disposition"] = "attachment; filename=student_upload_template.csv"
    return resp
