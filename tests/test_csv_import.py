from datetime import datetime

from werkzeug.security import check_password_hash

from models import User, Mentee
from utils.csv_import import (
    EMAIL_REQUIRED,
    PHONE_REQUIRED,
    ROLL_NO_REQUIRED,
    StudentRow,
    default_password,
    import_students,
    template_csv,
)

HEADER = "rollNo,fullName,studentEmail,studentPhone,parentsPhone,parentsEmail,mentorEmail,class,section\n"


def write_csv(tmp_path, body, header=HEADER, name="students.csv"):
    path = tmp_path / name
    path.write_text(header + body, encoding="utf-8")
    return str(path)


def test_default_password_format():
    assert default_password("STU099") == "STU099@123"


def test_aliases_first_non_empty_match_wins():
    row = StudentRow.from_csv(2, {
        "rollno": "  R1 ",
        "email": "a@b.co",
        "student_email": "",
        "phone": "98765 43210",
        "parent_phone": "1234567890",
        "name": "Ana",
        "grade": "9",
        "Section": "C",
    })
    assert row.roll_no == "R1"
    assert row.student_email == "a@b.co"
    assert row.student_phone == "98765 43210"
    assert row.parents_phone == "1234567890"
    assert row.full_name == "Ana"
    assert row.class_name == "9"
    assert row.section == "C"
    assert row.mentor_email == ""
    assert row.validate() is None


def test_validation_messages():
    assert StudentRow.from_csv(2, {"email": "a@b.co", "phone": "9876543210"}).validate() == ROLL_NO_REQUIRED
    assert StudentRow.from_csv(2, {"rollNo": "R1", "email": "not-an-email", "phone": "9876543210"}).validate() == EMAIL_REQUIRED
    assert StudentRow.from_csv(2, {"rollNo": "R1", "email": "a@b.co", "phone": "12345"}).validate() == PHONE_REQUIRED


def test_creates_user_and_mentee_with_defaults(app, tmp_path):
    path = write_csv(tmp_path, "STU099,,New.Student@Example.com,98765 43210,,,,,\n")

    report = import_students(path)

    assert report.total == 1
    assert len(report.success) == 1
    entry = report.success[0]
    assert entry["row"] == 2
    assert entry["default_password"] == "STU099@123"

    user = User.find_by_email("new.student@example.com")
    assert user["email"] == "new.student@example.com"
    assert user["role"] == "mentee"
    assert user["is_active"] is True
    assert check_password_hash(user["password"], "STU099@123")

    mentee = Mentee.find_by_user_id(user["_id"])
    assert mentee["full_name"] == "STU099"
    assert mentee["phone"] == "9876543210"
    assert mentee["class"] == "Not Assigned"
    assert mentee["section"] == "Not Assigned"
    assert mentee["academic_year"] == str(datetime.utcnow().year)
    assert mentee["mentor_id"] is None
    assert mentee["attendance"] == {"total_days": 0, "present_days": 0, "percentage": 0}


def test_reimport_is_idempotent(app, db, tmp_path):
    body = (
        "STU001,John Doe,john@example.com,9876543210,9876543211,parent@example.com,,10,A\n"
        "STU002,Jane Smith,jane@example.com,9876543212,,,,10,B\n"
    )
    path = write_csv(tmp_path, body)

    first = import_students(path)
    second = import_students(path)

    assert len(first.success) == 2
    assert len(second.success) == 0
    assert len(second.updated) == 2
    assert db.users.count_documents({}) == 2
    assert db.mentees.count_documents({}) == 2


def test_one_bad_email_fails_only_that_row(app, tmp_path):
    body = (
        "STU001,A,a@example.com,9876543210,,,,,\n"
        "STU002,B,broken-email,9876543211,,,,,\n"
        "STU003,C,c@example.com,9876543212,,,,,\n"
        "STU004,D,d@example.com,9876543213,,,,,\n"
    )
    report = import_students(write_csv(tmp_path, body))

    assert len(report.success) == 3
    assert len(report.failed) == 1
    assert report.failed[0]["row"] == 3
    assert report.failed[0]["error"] == EMAIL_REQUIRED
    assert report.errors == [{"row": 3, "error": EMAIL_REQUIRED}]


def test_bad_phone_has_short_wording_in_failed_and_full_wording_in_errors(app, tmp_path):
    report = import_students(write_csv(tmp_path, "STU001,A,a@example.com,12345,,,,,\n"))

    assert report.failed[0]["error"] == "Valid student phone number is required"
    assert report.errors == [{"row": 2, "error": PHONE_REQUIRED}]


def test_mentor_is_resolved_by_email(app, tmp_path, make_mentor):
    mentor = make_mentor(email="guide@example.com")
    body = "STU001,A,a@example.com,9876543210,,,Guide@Example.com,,\n"

    import_students(write_csv(tmp_path, body))

    mentee = Mentee.collection().find_one({"student_id": "STU001"})
    assert mentee["mentor_id"] == mentor["_id"]


def test_unknown_mentor_is_not_an_error(app, tmp_path):
    body = "STU001,A,a@example.com,9876543210,,,nobody@example.com,,\n"
    report = import_students(write_csv(tmp_path, body))

    assert len(report.success) == 1
    assert Mentee.collection().find_one({"student_id": "STU001"})["mentor_id"] is None


def test_update_keeps_omitted_fields_and_merges_parent_info(app, tmp_path):
    first = "STU001,John Doe,john@example.com,9876543210,9876543211,parent@example.com,,10,A\n"
    import_students(write_csv(tmp_path, first, name="first.csv"))

    second = "STU001X,,JOHN@example.com,9999999999,,bad-parent-email,,,\n"
    report = import_students(write_csv(tmp_path, second, name="second.csv"))

    assert len(report.updated) == 1
    mentee = Mentee.collection().find_one({})
    assert mentee["student_id"] == "STU001X"
    assert mentee["phone"] == "9999999999"
    assert mentee["full_name"] == "John Doe"
    assert mentee["class"] == "10"
    assert mentee["section"] == "A"
    assert mentee["parent_info"] == {"primary_contact": "9876543211", "email": "parent@example.com"}


def test_existing_mentee_account_without_profile_gets_one(app, db, tmp_path):
    User(email="orphan@example.com", password="x", role="mentee").save()

    report = import_students(write_csv(tmp_path, "STU007,Orphan,orphan@example.com,9876543210,,,,,\n"))

    assert len(report.updated) == 1
    assert report.updated[0]["message"] == "Profile created for existing account"
    assert db.mentees.count_documents({"student_id": "STU007"}) == 1


def test_email_of_other_role_is_reported(app, tmp_path, make_mentor):
    make_mentor(email="taken@example.com")

    report = import_students(write_csv(tmp_path, "STU001,A,taken@example.com,9876543210,,,,,\n"))

    assert len(report.failed) == 1
    assert report.failed[0]["error"] == "Email already registered to a mentor account"


def test_duplicate_roll_numbers_are_not_deduplicated(app, db, tmp_path):
    body = (
        "STU001,A,a@example.com,9876543210,,,,,\n"
        "STU001,B,b@example.com,9876543211,,,,,\n"
    )
    report = import_students(write_csv(tmp_path, body))

    assert len(report.success) == 2
    assert db.mentees.count_documents({"student_id": "STU001"}) == 2


def test_unexpected_error_marks_row_failed_and_continues(app, tmp_path, monkeypatch):
    import utils.csv_import as csv_import

    calls = []
    real = csv_import.resolve_mentor

    def flaky(email):
        calls.append(email)
        if len(calls) == 1:
            raise RuntimeError("lookup exploded")
        return real(email)

    monkeypatch.setattr(csv_import, "resolve_mentor", flaky)
    body = (
        "STU001,A,a@example.com,9876543210,,,,,\n"
        "STU002,B,b@example.com,9876543211,,,,,\n"
    )
    report = import_students(write_csv(tmp_path, body))

    assert report.failed[0]["row"] == 2
    assert report.failed[0]["error"] == "lookup exploded"
    assert [s["row"] for s in report.success] == [3]


def test_template_has_header_and_three_rows():
    lines = template_csv().split("\r\n")
    assert lines[0] == HEADER.strip()
    assert len(lines) == 4
    assert lines[1].startswith("STU001,")
