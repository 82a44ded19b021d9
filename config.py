import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key-change-in-production")

    # Module inputs are JSON form snapshots; full reports stay well below this
    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_MB", "5")) * 1024 * 1024

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Report payloads are mostly repeated Danish text and compress well
    COMPRESS_MIMETYPES = ["application/json"]
    COMPRESS_MIN_SIZE = 500


class TestConfig(Config):
    TESTING = True
