from utils.db import mongo
from datetime import datetime
from pymongo import ReturnDocument

STATUSES = ("present", "absent", "late", "excused")


class Attendance:
    @staticmethod
    def collection():
        return mongo.db.attendances

    def __init__(self, mentee_id, date, status, marked_by, remarks=None,
                 created_at=None, updated_at=None):
        if status not in STATUSES:
            raise ValueError(f"Invalid attendance status: {status}")
        self.mentee_id = mentee_id
        self.date = date  # "YYYY-MM-DD"
        self.status = status
        self.marked_by = marked_by
        self.remarks = remarks or ""
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def to_dict(self):
        return {
            "mentee_id": self.mentee_id,
            "date": self.date,
            "status": self.status,
            "marked_by": self.marked_by,
            "remarks": self.remarks,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    def save(self):
        return Attendance.collection().insert_one(self.to_dict())

    # Insert or overwrite status/marked_by for (mentee_id, date); remarks are kept
    def upsert(self):
        return Attendance.collection().find_one_and_update(
            {"mentee_id": self.mentee_id, "date": self.date},
            {
                "$set": {
                    "status": self.status,
                    "marked_by": self.marked_by,
                    "updated_at": self.updated_at,
                },
                "$setOnInsert": {
                    "remarks": self.remarks,
                    "created_at": self.created_at,
                },
            },
            upsert=True,
            return_document=ReturnDocument.AFTER,
        )

    @staticmethod
    def count_for(mentee_id, status=None):
        query = {"mentee_id": mentee_id}
        if status:
            query["status"] = status
        return Attendance.collection().count_documents(query)
