import csv
import io

from flask import make_response
from openpyxl import Workbook
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from models import Attendance, Mentee
from utils.attendance_sync import month_days

COLUMNS = ["#", "Name", "Student ID", "Class", "Section", "Date", "Status", "Remarks"]


def monthly_attendance_rows(month, year):
    days = month_days(month, year)
    mentees = {m["_id"]: m for m in Mentee.collection().find()}

    records = Attendance.collection().find(
        {"date": {"$gte": days[0], "$lte": days[-1]}}
    ).sort([("date", 1), ("mentee_id", 1)])

    rows = []
    for rec in records:
        mentee = mentees.get(rec["mentee_id"])
        if not mentee:
            continue
        rows.append({
            "name": mentee.get("full_name", ""),
            "student_id": mentee.get("student_id", ""),
            "class": mentee.get("class", ""),
            "section": mentee.get("section", ""),
            "date": rec["date"],
            "status": rec["status"],
            "remarks": rec.get("remarks", ""),
        })
    return rows


def _values(i, row):
    return [i, row["name"], row["student_id"], row["class"], row["section"],
            row["date"], row["status"], row["remarks"]]


def _attachment(body, filename, content_type):
    resp = make_response(body)
    resp.headers["Content-Disposition"] = f"attachment; filename={filename}"
    resp.headers["Content-Type"] = content_type
    return resp


# ================= EXPORT HELPERS =================

def export_csv(title, records, filename):
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow([title])
    writer.writerow([])
    writer.writerow(COLUMNS)
    for i, row in enumerate(records, start=1):
        writer.writerow(_values(i, row))
    return _attachment(buffer.getvalue(), f"{filename}.csv", "text/csv")


def export_excel(title, records, filename):
    wb = Workbook()
    ws = wb.active
    ws.title = "Attendance Report"
    ws.append([title])
    ws.append([])
    ws.append(COLUMNS)
    for i, row in enumerate(records, start=1):
        ws.append(_values(i, row))
    buffer = io.BytesIO()
    wb.save(buffer)
    buffer.seek(0)
    return _attachment(
        buffer.getvalue(),
        f"{filename}.xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


def export_pdf(title, records, filename):
    buffer = io.BytesIO()
    p = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    y = height - 80
    p.setFont("Helvetica-Bold", 14)
    p.drawString(60, y, title)
    y -= 30
    p.setFont("Helvetica", 10)
    for i, row in enumerate(records, start=1):
        line = (f"{i}. {row['name']} ({row['student_id']}) | {row['class']}-{row['section']} | "
                f"{row['date']} | {row['status']} | {row['remarks']}")
        p.drawString(60, y, line)
        y -= 12
        if y < 100:
            p.showPage()
            p.setFont("Helvetica", 10)
            y = height - 80
    p.save()
    pdf = buffer.getvalue()
    buffer.close()
    return _attachment(pdf, f"{filename}.pdf", "application/pdf")


EXPORTERS = {
    "csv": export_csv,
    "xlsx": export_excel,
    "pdf": export_pdf,
}
