import os
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parents[1]


class Config:
    SECRET_KEY = os.getenv("AUTOUNITE_SECRET_KEY", "dev-secret-change-me")
    APP_ENV = os.getenv("APP_ENV", "development")

    # Pickle file backing the Store
    DATA_PATH = os.getenv("AUTOUNITE_DATA_PATH", str(BASE_DIR / "data.pkl"))

    # Local timezone used when rendering dates inside notification messages
    TIMEZONE = os.getenv("AUTOUNITE_TIMEZONE", "America/Lima")

    LOG_LEVEL = os.getenv("AUTOUNITE_LOG_LEVEL", "INFO").upper()
    LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
