import os


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
    MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017/MentorshipSystem")
    # optional ready-made client object used instead of one built from MONGO_URI
    MONGO_CLIENT = None

    # CSV uploads are written here and removed once processed
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join("uploads", "csv"))
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    MONGO_URI = "mongodb://localhost:27017/MentorshipSystemTest"
    LOG_LEVEL = "DEBUG"
