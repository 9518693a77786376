from __future__ import annotations

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from .academic_calendar.controller import register as register_calendar
from .app_logger import get_logger, setup_logging
from .attendance.controller import register as register_attendance
from .config import get_settings_module, load_settings
from .core.constants import CACHE_SWEEP_INTERVAL_SECONDS, DEPARTMENT_REPORT_TTL_SECONDS
from .container import Container, build_container
from .database.bootstrap import apply_schema, list_tables
from .reports.controller import register as register_reports
from .semesters.controller import register as register_semesters
from .timetable.controller import register as register_timetable

logger = get_logger("app")

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(settings_name: Optional[str] = None, *, container: Optional[Container] = None) -> Flask:
    """App factory.

    Passing a ready `container` skips database bootstrap; tests use this to
    run the HTTP layer against in-memory repositories.
    """
    load_dotenv(override=False)
    settings_name = settings_name or get_settings_module()
    settings = load_settings(settings_name)

    setup_logging(getattr(settings, "LOG_LEVEL", None))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.json.sort_keys = False

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_name,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            report_cache_ttl_seconds=getattr(settings, "REPORT_CACHE_TTL_SECONDS", DEPARTMENT_REPORT_TTL_SECONDS),
        )

    container.cache.start_sweeper(getattr(settings, "CACHE_SWEEP_INTERVAL_SECONDS", CACHE_SWEEP_INTERVAL_SECONDS))

    register_calendar(app, container)
    register_semesters(app, container)
    register_timetable(app, container)
    register_attendance(app, container)
    register_reports(app, container)

    return app
