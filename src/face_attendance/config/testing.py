import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "face_attendance_test"),
}

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")

EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "128"))
MATCH_METRIC = "cosine"
MATCH_THRESHOLD = 0.65
MATCH_TIMEOUT_SECONDS = 2.0
REQUIRE_FAIR_CONFIDENCE = False

DEFAULT_HOURLY_RATE = "125000"
MASS_LATE_RATIO = 0.3
DEFAULT_ORG_ID = 1

LOG_LEVEL = "WARNING"

DEBUG = False
TESTING = True

AUTO_INIT_DB = False
