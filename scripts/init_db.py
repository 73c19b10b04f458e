from __future__ import annotations

import importlib
import logging
from dataclasses import replace
from datetime import date
from pathlib import Path

from face_attendance.common.logging_setup import configure_logging
from face_attendance.config import get_settings_module
from face_attendance.database.bootstrap import apply_schema, list_tables
from face_attendance.database.connection import DBConfig, DatabaseConnection
from face_attendance.policy.model import default_policy
from face_attendance.policy.mysql_policy_repository import MySQLPolicySource

logger = logging.getLogger("face_attendance.scripts.init_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)

    # Give the default org an explicit policy row so check-ins do not run on the fallback.
    source = MySQLPolicySource(DatabaseConnection(DBConfig.from_dict(db_config)))
    org_id = int(getattr(settings, "DEFAULT_ORG_ID", 1))
    if source.get_effective_policy(org_id, date.today()) is None:
        policy_id = source.save(replace(default_policy(org_id), effective_from=date.today()))
        logger.info("Created default attendance policy %s for org %s", policy_id, org_id)

    tables = list_tables(db_config)
    logger.info(
        "OK: Applied schema.sql -> %s@%s:%s/%s (tables=%d)",
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
