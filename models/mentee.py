from utils.db import mongo
from utils.helpers import to_object_id
from datetime import datetime

NOT_ASSIGNED = "Not Assigned"


class Mentee:

    @staticmethod
    def collection():
        return mongo.db.mentees

    def __init__(self, user_id, full_name, student_id, phone, class_name=None, section=None,
                 academic_year=None, parent_info=None, mentor_id=None, attendance=None,
                 created_at=None, updated_at=None):
        self.user_id = user_id
        self.full_name = full_name
        self.student_id = student_id
        self.phone = phone
        self.class_name = class_name or NOT_ASSIGNED
        self.section = section or NOT_ASSIGNED
        self.academic_year = academic_year or str(datetime.utcnow().year)
        self.parent_info = parent_info or {"primary_contact": "", "email": ""}
        self.mentor_id = mentor_id
        # materialized from the attendances collection, see utils/attendance_sync.py
        self.attendance = attendance or {"total_days": 0, "present_days": 0, "percentage": 0}
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "student_id": self.student_id,
            "phone": self.phone,
            "class": self.class_name,
            "section": self.section,
            "academic_year": self.academic_year,
            "parent_info": self.parent_info,
            "mentor_id": self.mentor_id,
            "attendance": self.attendance,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    @classmethod
    def from_payload(cls, user_id, data):
        mentor_id = None
        if data.get("mentor_id"):
            mentor_id = to_object_id(data["mentor_id"])
            if mentor_id is None:
                raise ValueError(f"Invalid mentor_id: {data['mentor_id']}")
        return cls(
            user_id=user_id,
            full_name=data.get("full_name") or data.get("student_id") or "",
            student_id=data.get("student_id") or "",
            phone=data.get("phone") or "",
            class_name=data.get("class"),
            section=data.get("section"),
            academic_year=data.get("academic_year"),
            parent_info=data.get("parent_info"),
            mentor_id=mentor_id,
        )

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find_by_id(mentee_id):
        return Mentee.collection().find_one({"_id": mentee_id})

    @staticmethod
    def find_by_user_id(user_id):
        return Mentee.collection().find_one({"user_id": user_id})

    # Unassign every mentee of a removed mentor
    @staticmethod
    def clear_mentor(mentor_id):
        return Mentee.collection().update_many(
            {"mentor_id": mentor_id},
            {"$set": {"mentor_id": None, "updated_at": datetime.utcnow()}}
        )
