import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "face_attendance"),
}

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

EMBEDDING_DIMENSION = int(os.getenv("EMBEDDING_DIMENSION", "128"))
MATCH_METRIC = os.getenv("MATCH_METRIC", "cosine")
MATCH_THRESHOLD = float(os.getenv("MATCH_THRESHOLD", "0.65"))
MATCH_TIMEOUT_SECONDS = float(os.getenv("MATCH_TIMEOUT_SECONDS", "2.0"))
REQUIRE_FAIR_CONFIDENCE = bool(int(os.getenv("REQUIRE_FAIR_CONFIDENCE", "1")))

DEFAULT_HOURLY_RATE = os.getenv("DEFAULT_HOURLY_RATE", "125000")
MASS_LATE_RATIO = float(os.getenv("MASS_LATE_RATIO", "0.3"))
DEFAULT_ORG_ID = int(os.getenv("DEFAULT_ORG_ID", "1"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
