import os
from datetime import timedelta


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(days=1)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=30)

    MAX_CONTENT_LENGTH = int(os.environ.get("MAX_CONTENT_LENGTH", 5 * 1024 * 1024))
    UPLOAD_SUBDIR = os.environ.get("UPLOAD_SUBDIR", "static/uploads")

    # default until an admin stores one through /api/admin/tax-rate
    TAX_RATE_PERCENT = os.environ.get("TAX_RATE_PERCENT", "7")
    PAYMENT_VERIFY_DELAY = float(os.environ.get("PAYMENT_VERIFY_DELAY", 3.0))
    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "฿")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE")

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")


class TestConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-key-with-enough-length-for-hs256"
    PAYMENT_VERIFY_DELAY = 0.0
    TAX_RATE_PERCENT = "7"
    LOG_FILE = None

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///:memory:"
