import os

class Config:
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///vitalguard.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-prod")
    JSON_SORT_KEYS = False
    PREFERRED_URL_SCHEME = "https"
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    # "log" writes notifications to the app logger, "null" drops them
    NOTIFIER = os.getenv("NOTIFIER", "log")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "DEBUG"
    NOTIFIER = "null"
