import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "face_attendance"),
}

# "mysql" or "memory" (process-local, lost on restart)
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "128"))
MATCH_METRIC = os.getenv("MATCH_METRIC", "cosine")
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.65"))
MATCH_TIMEOUT_SECONDS = float(os.getenv("MATCH_TIMEOUT_SECONDS", "2.0"))
# Reject poor-tier matches even when they clear the threshold.
REQUIRE_FAIR_CONFIDENCE = bool(int(os.getenv("REQUIRE_FAIR_CONFIDENCE", "0")))

DEFAULT_HOURLY_RATE = os.getenv("DEFAULT_HOURLY_RATE", "125000")
MASS_LATE_RATIO = float(os.getenv("MASS_LATE_RATIO", "0.3"))
DEFAULT_ORG_ID = int(os.getenv("DEFAULT_ORG_ID", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
