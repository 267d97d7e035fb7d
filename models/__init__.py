# models/__init__.py

from .users import User, ROLES
from .admin import Admin
from .mentor import Mentor
from .mentee import Mentee, NOT_ASSIGNED
from .attendance import Attendance, STATUSES
from .group import Group
from .leave_request import LeaveRequest, LEAVE_STATUSES

# role -> profile model; every user owns exactly one profile of its role
PROFILE_MODELS = {
    "admin": Admin,
    "mentor": Mentor,
    "mentee": Mentee,
}


def profile_model(role):
    try:
        return PROFILE_MODELS[role]
    except KeyError:
        raise ValueError(f"Unknown role: {role}")


def find_profile(user):
    """Return the profile document belonging to a user document."""
    return profile_model(user["role"]).find_by_user_id(user["_id"])


__all__ = [
    "User",
    "Admin",
    "Mentor",
    "Mentee",
    "Attendance",
    "Group",
    "LeaveRequest",
    "ROLES",
    "STATUSES",
    "LEAVE_STATUSES",
    "NOT_ASSIGNED",
    "PROFILE_MODELS",
    "profile_model",
    "find_profile",
]
