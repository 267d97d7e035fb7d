from utils.db import mongo
from datetime import datetime

LEAVE_STATUSES = ("pending", "approved", "rejected")


class LeaveRequest:

    @staticmethod
    def collection():
        return mongo.db.leave_requests

    def __init__(self, mentee_id, mentor_id, reason, from_date, to_date, status="pending",
                 created_at=None, updated_at=None):
        if status not in LEAVE_STATUSES:
            raise ValueError(f"Invalid leave status: {status}")
        self.mentee_id = mentee_id
        self.mentor_id = mentor_id
        self.reason = reason
        self.from_date = from_date
        self.to_date = to_date
        self.status = status
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def to_dict(self):
        return {
            "mentee_id": self.mentee_id,
            "mentor_id": self.mentor_id,
            "reason": self.reason,
            "from_date": self.from_date,
            "to_date": self.to_date,
            "status": self.status,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
