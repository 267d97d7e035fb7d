from utils.db import mongo
from datetime import datetime


class Group:

    @staticmethod
    def collection():
        return mongo.db.groups

    def __init__(self, name, mentor_id, description=None, color=None, mentee_ids=None,
                 is_archived=False, created_at=None, updated_at=None):
        self.name = name
        self.mentor_id = mentor_id
        self.description = description or ""
        self.color = color or "#3B82F6"
        self.mentee_ids = mentee_ids or []
        self.is_archived = is_archived
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    def to_dict(self):
        return {
            "name": self.name,
            "mentor_id": self.mentor_id,
            "description": self.description,
            "color": self.color,
            "mentee_ids": self.mentee_ids,
            "is_archived": self.is_archived,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    def save(self):
        return self.collection().insert_one(self.to_dict())
