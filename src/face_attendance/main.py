from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from flask import Flask

from .attendance.controller import register as register_attendance
from .common.logging_setup import configure_logging
from .config import get_settings_module
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .faces.controller import register as register_faces
from .notifications.sink import NotificationSink
from .requests.controller import register as register_requests

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def create_app(settings: Optional[Any] = None, *, sink: Optional[NotificationSink] = None) -> Flask:
    """Flask app factory.

    ``settings`` defaults to the module picked by ``APP_ENV``; tests pass their
    own object to run against the in-memory backend.
    """
    load_dotenv(override=False)
    if settings is None:
        settings_module = get_settings_module()
        settings = importlib.import_module(settings_module)
    else:
        settings_module = type(settings).__name__

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    backend = str(getattr(settings, "STORAGE_BACKEND", "mysql")).lower()
    db_config = getattr(settings, "DB_CONFIG", {})
    logger.info(
        "Starting face attendance (settings=%s, backend=%s, db=%s@%s:%s/%s)",
        settings_module,
        backend,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=SCHEMA_PATH)
        logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(settings, sink=sink)
    app.extensions["face_attendance"] = container
    atexit.register(container.close)

    register_attendance(app, container)
    register_faces(app, container)
    register_requests(app, container)

    return app


def get_container(app: Flask) -> Container:
    return app.extensions["face_attendance"]
