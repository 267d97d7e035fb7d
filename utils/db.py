"""
utils/db.py
-----------------
This module initializes and manages the MongoDB connection
for the entire Flask application.
"""

import logging

from flask_pymongo import PyMongo
from pymongo import ASCENDING

logger = logging.getLogger(__name__)

# Create a global MongoDB instance
mongo = PyMongo()


def init_db_connection(app):
    """
    Initialize MongoDB connection with Flask app.
    Expects MONGO_URI to be present in app.config.
    """
    mongo.init_app(app)

    # a pre-built client (e.g. an in-memory one) replaces the one built from MONGO_URI
    client = app.config.get("MONGO_CLIENT")
    if client is not None:
        db_name = mongo.db.name
        mongo.cx.close()
        mongo.cx = client
        mongo.db = client[db_name]

    logger.info("MongoDB connection initialized for %s", app.config.get("MONGO_URI"))
    return mongo


def ensure_indexes(db=None):
    """Create the indexes the application relies on (idempotent)."""
    db = db if db is not None else mongo.db

    db.users.create_index([("email", ASCENDING)], unique=True)
    db.admins.create_index([("user_id", ASCENDING)], unique=True)
    db.mentors.create_index([("user_id", ASCENDING)], unique=True)
    db.mentees.create_index([("user_id", ASCENDING)], unique=True)
    db.mentees.create_index([("mentor_id", ASCENDING)])

    # one attendance record per mentee per day
    db.attendances.create_index(
        [("mentee_id", ASCENDING), ("date", ASCENDING)], unique=True
    )
    db.attendances.create_index([("date", ASCENDING)])
