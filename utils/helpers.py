import re
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_RE = re.compile(r"^[0-9]{10}$")
DATE_FORMAT = "%Y-%m-%d"


def to_object_id(value):
    """Return value as an ObjectId, or None when it cannot be one."""
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(str(value))
    except (InvalidId, TypeError):
        return None


def strip_spaces(value):
    return re.sub(r"\s+", "", value or "")


def is_valid_email(email):
    return bool(email) and EMAIL_RE.match(email) is not None


def is_valid_phone(phone):
    return bool(phone) and PHONE_RE.match(strip_spaces(phone)) is not None


def parse_date(value):
    """Validate a YYYY-MM-DD string and return it normalised."""
    if not isinstance(value, str):
        raise ValueError(f"Invalid date: {value!r}")
    return datetime.strptime(value, DATE_FORMAT).strftime(DATE_FORMAT)


def round_half_up(value):
    return int(value + 0.5)
