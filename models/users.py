from utils.db import mongo
from utils.helpers import to_object_id
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash

ROLES = ("admin", "mentor", "mentee")


class User:

    @staticmethod
    def collection():
        return mongo.db.users

    def __init__(self, email, password, role, is_active=True, last_login=None,
                 created_at=None, updated_at=None):
        if role not in ROLES:
            raise ValueError(f"Unknown role: {role}")
        self.email = email.strip().lower()
        self.password = generate_password_hash(password)
        self.role = role
        self.is_active = is_active
        self.last_login = last_login
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    # Convert to dictionary for MongoDB
    def to_dict(self):
        return {
            "email": self.email,
            "password": self.password,
            "role": self.role,
            "is_active": self.is_active,
            "last_login": self.last_login,
            "created_at": self.created_at,
            "updated_at": self.updated_at
        }

    # Save new user
    def save(self):
        return self.collection().insert_one(self.to_dict())

    # Find user by ID
    @staticmethod
    def find_by_id(user_id):
        oid = to_object_id(user_id)
        if oid is None:
            return None
        return User.collection().find_one({"_id": oid})

    # Find user by email (emails are stored lower-cased)
    @staticmethod
    def find_by_email(email, role=None):
        query = {"email": (email or "").strip().lower()}
        if role:
            query["role"] = role
        return User.collection().find_one(query)

    # Verify password
    @staticmethod
    def verify_password(email, password):
        user = User.find_by_email(email)
        if user and check_password_hash(user["password"], password or ""):
            return user
        return None

    @staticmethod
    def touch_last_login(user_id):
        now = datetime.utcnow()
        return User.collection().update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"last_login": now, "updated_at": now}}
        )

    @staticmethod
    def public(user):
        """User document without the password hash."""
        if not user:
            return user
        return {k: v for k, v in user.items() if k != "password"}
