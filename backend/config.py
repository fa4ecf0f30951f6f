import os
from pathlib import Path

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./seat_allocator.db")

EXPORT_DIR = Path(os.environ.get("EXPORT_DIR", Path(__file__).resolve().parent / "exports"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()
