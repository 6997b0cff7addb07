from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.constants import DEFAULT_AUTOSAVE_DELAY_MS, DEFAULT_MONTHLY_PAGE_SIZE, DEFAULT_ORG_TIMEZONE
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables

logger = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TENANT_ID"] = getattr(settings, "TENANT_ID", None)

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"), db_config.get("host"), db_config.get("port", 3306), db_config.get("database"),
    )

    container = build_container(
        db_config=db_config,
        page_size=int(getattr(settings, "MONTHLY_PAGE_SIZE", DEFAULT_MONTHLY_PAGE_SIZE)),
        autosave_delay_ms=int(getattr(settings, "AUTOSAVE_DELAY_MS", DEFAULT_AUTOSAVE_DELAY_MS)),
        org_timezone=getattr(settings, "ORG_TIMEZONE", DEFAULT_ORG_TIMEZONE),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(container.conn)
        logger.info("schema ready (tables=%s)", len(list_tables(container.conn)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(container.conn)
        logger.info("shift seed ready")

    register_attendance(app, container)

    return app
