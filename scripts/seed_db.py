from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.staff_attendance.staff_attendance.database.bootstrap import apply_seed_sql
from src.staff_attendance.staff_attendance.database.connection import DatabaseConnection, DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(settings.DB_CONFIG))

    # Shift schedules only; team members come from the staff directory.
    apply_seed_sql(conn, seed_path=REPO_ROOT / "database" / "seed.sql")
    cfg = conn.config
    logger.info("Seeded shifts -> %s@%s:%s/%s", cfg.user, cfg.host, cfg.port, cfg.database)


if __name__ == "__main__":
    main()
