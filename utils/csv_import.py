"""
utils/csv_import.py
-----------------
Bulk student import from an uploaded CSV file.

Every data row is handled on its own: it is validated, its optional mentor is
resolved, and the student is then created or updated by email. A failing row
is reported and never stops the rows after it.
"""

import csv
import logging
from datetime import datetime

from models import User, Mentor, Mentee, NOT_ASSIGNED
from utils.helpers import is_valid_email, is_valid_phone, strip_spaces

logger = logging.getLogger(__name__)

# Accepted header spellings per field, first non-empty match wins
COLUMN_ALIASES = (
    ("roll_no", ("rollNo", "rollno", "RollNo", "ROLLNO")),
    ("full_name", ("fullName", "full_name", "name", "studentName", "student_name")),
    ("student_email", ("studentEmail", "student_email", "email")),
    ("student_phone", ("studentPhone", "student_phone", "phone")),
    ("parents_phone", ("parentsPhone", "parents_phone", "parentPhone", "parent_phone")),
    ("parents_email", ("parentsEmail", "parents_email", "parentEmail", "parent_email")),
    ("mentor_email", ("mentorEmail", "mentor_email")),
    ("class_name", ("class", "className", "Class", "grade")),
    ("section", ("section", "Section")),
)

TEMPLATE_HEADER = [
    "rollNo", "fullName", "studentEmail", "studentPhone", "parentsPhone",
    "parentsEmail", "mentorEmail", "class", "section",
]

TEMPLATE_ROWS = [
    ["STU001", "John Doe", "john.doe@example.com", "9876543210", "9876543211",
     "parent@example.com", "mentor@example.com", "10", "A"],
    ["STU002", "Jane Smith", "jane.smith@example.com", "9876543212", "9876543213",
     "parent2@example.com", "mentor@example.com", "10", "A"],
    ["STU003", "Mike Johnson", "mike.johnson@example.com", "9876543214", "9876543215",
     "parent3@example.com", "mentor@example.com", "10", "B"],
]

ROLL_NO_REQUIRED = "Roll number is required"
EMAIL_REQUIRED = "Valid student email is required"
PHONE_REQUIRED = "Valid student phone number is required (10 digits)"

# failed[] carries the shorter wording; errors[] keeps the full message
FAILED_WORDING = {PHONE_REQUIRED: "Valid student phone number is required"}


def default_password(roll_no):
    """First-login password handed out for imported students."""
    return f"{roll_no}@123"


def template_csv():
    return "\r\n".join(",".join(row) for row in [TEMPLATE_HEADER] + TEMPLATE_ROWS)


class StudentRow:
    """One parsed CSV line. Never stored as-is."""

    def __init__(self, row_number, data, **fields):
        self.row_number = row_number
        self.data = data
        for field, _ in COLUMN_ALIASES:
            setattr(self, field, fields.get(field, ""))

    @classmethod
    def from_csv(cls, row_number, raw):
        fields = {}
        for field, aliases in COLUMN_ALIASES:
            fields[field] = ""
            for alias in aliases:
                value = raw.get(alias)
                if isinstance(value, str) and value.strip():
                    fields[field] = value.strip()
                    break
        # drop the overflow bucket DictReader uses for surplus cells
        data = {k: v for k, v in raw.items() if k is not None}
        return cls(row_number, data, **fields)

    def validate(self):
        """Return the first validation error, or None when the row is usable."""
        if not self.roll_no:
            return ROLL_NO_REQUIRED
        if not is_valid_email(self.student_email):
            return EMAIL_REQUIRED
        if not is_valid_phone(self.student_phone):
            return PHONE_REQUIRED
        return None

    def parent_info(self):
        return {
            "primary_contact": strip_spaces(self.parents_phone),
            "email": self.parents_email.lower() if is_valid_email(self.parents_email) else "",
        }


class ImportReport:

    def __init__(self):
        self.total = 0
        self.success = []
        self.updated = []
        self.failed = []
        self.errors = []

    def fail(self, row, error, validation=False):
        if validation:
            self.errors.append({"row": row.row_number, "error": error})
        self.failed.append({"row": row.row_number, "data": row.data, "error": FAILED_WORDING.get(error, error)})

    def to_dict(self):
        return {
            "message": "CSV processing completed",
            "summary": {
                "total": self.total,
                "created": len(self.success),
                "updated": len(self.updated),
                "failed": len(self.failed),
            },
            "details": {
                "success": self.success,
                "updated": self.updated,
                "failed": self.failed,
            },
            "errors": self.errors,
        }


def read_rows(path):
    """Parse a CSV file into StudentRows; row 1 is the header."""
    with open(path, newline="", encoding="utf-8-sig") as fh:
        reader = csv.DictReader(fh)
        return [StudentRow.from_csv(number, raw) for number, raw in enumerate(reader, start=2)]


def resolve_mentor(mentor_email):
    if not is_valid_email(mentor_email):
        return None
    mentor_user = User.find_by_email(mentor_email, role="mentor")
    if not mentor_user:
        return None
    return Mentor.find_by_user_id(mentor_user["_id"])


def _create_mentee(user_id, row, mentor):
    mentee = Mentee(
        user_id=user_id,
        full_name=row.full_name or row.roll_no,
        student_id=row.roll_no,
        phone=strip_spaces(row.student_phone),
        class_name=row.class_name or NOT_ASSIGNED,
        section=row.section or NOT_ASSIGNED,
        academic_year=str(datetime.utcnow().year),
        parent_info=row.parent_info(),
        mentor_id=mentor["_id"] if mentor else None,
    )
    return mentee.save()


def _update_mentee(mentee, row, mentor):
    changes = {
        "phone": strip_spaces(row.student_phone),
        "student_id": row.roll_no,
        "updated_at": datetime.utcnow(),
    }
    if row.full_name:
        changes["full_name"] = row.full_name
    if row.class_name:
        changes["class"] = row.class_name
    if row.section:
        changes["section"] = row.section
    if mentor:
        changes["mentor_id"] = mentor["_id"]

    # parent fields are merged one by one
    if row.parents_phone:
        changes["parent_info.primary_contact"] = strip_spaces(row.parents_phone)
    if is_valid_email(row.parents_email):
        changes["parent_info.email"] = row.parents_email.lower()

    if not isinstance(mentee.get("parent_info"), dict):
        # dotted $set cannot descend into a null or scalar
        Mentee.collection().update_one(
            {"_id": mentee["_id"]}, {"$set": {"parent_info": {"primary_contact": "", "email": ""}}}
        )
    Mentee.collection().update_one({"_id": mentee["_id"]}, {"$set": changes})


def process_row(row, report):
    error = row.validate()
    if error:
        report.fail(row, error, validation=True)
        return

    mentor = resolve_mentor(row.mentor_email)
    existing_user = User.find_by_email(row.student_email)

    if existing_user:
        if existing_user.get("role") != "mentee":
            report.fail(row, f"Email already registered to a {existing_user.get('role')} account")
            return

        mentee = Mentee.find_by_user_id(existing_user["_id"])
        if mentee:
            _update_mentee(mentee, row, mentor)
            message = "Updated successfully"
        else:
            _create_mentee(existing_user["_id"], row, mentor)
            message = "Profile created for existing account"

        report.updated.append({
            "row": row.row_number,
            "roll_no": row.roll_no,
            "email": row.student_email,
            "message": message,
        })
        return

    password = default_password(row.roll_no)
    result = User(email=row.student_email, password=password, role="mentee").save()
    _create_mentee(result.inserted_id, row, mentor)

    report.success.append({
        "row": row.row_number,
        "roll_no": row.roll_no,
        "email": row.student_email,
        "default_password": password,
        "message": "Created successfully",
    })


def import_students(path):
    """Import every row of the CSV at path and return an ImportReport."""
    rows = read_rows(path)
    report = ImportReport()
    report.total = len(rows)

    for row in rows:
        logger.debug("Processing row %s: %s", row.row_number, row.data)
        try:
            process_row(row, report)
        except Exception as e:
            logger.exception("Error processing row %s", row.row_number)
            report.fail(row, str(e))

    logger.info(
        "CSV import finished: %s rows, %s created, %s updated, %s failed",
        report.total, len(report.success), len(report.updated), len(report.failed),
    )
    return report
