import mongomock
import pytest

from app import create_app
from config import TestConfig
from models import User, Admin, Mentor, Mentee
from utils.db import mongo


@pytest.fixture
def app(tmp_path):
    class Config(TestConfig):
        UPLOAD_FOLDER = str(tmp_path / "uploads")
        # in-memory server, indexes are built by create_app
        MONGO_CLIENT = mongomock.MongoClient()

    yield create_app(Config)


@pytest.fixture
def db(app):
    return mongo.db


@pytest.fixture
def admin_user(app):
    result = User(email="admin@example.com", password="secret123", role="admin").save()
    Admin(user_id=result.inserted_id, full_name="Site Admin").save()
    return User.find_by_id(result.inserted_id)


@pytest.fixture
def client(app, admin_user):
    """Test client logged in as the admin."""
    client = app.test_client()
    with client.session_transaction() as sess:
        sess["user_id"] = str(admin_user["_id"])
        sess["role"] = "admin"
    return client


@pytest.fixture
def anonymous_client(app):
    return app.test_client()


@pytest.fixture
def make_mentor(app):
    def _make(email="mentor@example.com", full_name="Mentor One"):
        result = User(email=email, password="mentorpass", role="mentor").save()
        Mentor(user_id=result.inserted_id, full_name=full_name).save()
        return Mentor.find_by_user_id(result.inserted_id)
    return _make


@pytest.fixture
def make_mentee(app):
    def _make(email="student@example.com", roll_no="STU001", full_name="Student One", mentor_id=None):
        result = User(email=email, password=f"{roll_no}@123", role="mentee").save()
        Mentee(
            user_id=result.inserted_id,
            full_name=full_name,
            student_id=roll_no,
            phone="9876543210",
            mentor_id=mentor_id,
        ).save()
        return Mentee.find_by_user_id(result.inserted_id)
    return _make
