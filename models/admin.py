from utils.db import mongo
from datetime import datetime


class Admin:

    @staticmethod
    def collection():
        return mongo.db.admins

    def __init__(self, user_id, full_name, phone=None, department=None, position=None,
                 created_at=None, updated_at=None):
        self.user_id = user_id
        self.full_name = full_name
        self.phone = phone or ""
        self.department = department or ""
        self.position = position or ""
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def to_dict(self):
        return {
            "user_id": self.user_id,
            "full_name": self.full_name,
            "phone": self.phone,
            "department": self.department,
            "position": self.position,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    @classmethod
    def from_payload(cls, user_id, data):
        return cls(
            user_id=user_id,
            full_name=data.get("full_name") or "",
            phone=data.get("phone"),
            department=data.get("department"),
            position=data.get("position"),
        )

    def save(self):
        return self.collection().insert_one(self.to_dict())

    @staticmethod
    def find_by_user_id(user_id):
        return Admin.collection().find_one({"user_id": user_id})
