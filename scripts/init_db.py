"""Create the database and apply database/schema.sql for the current APP_ENV."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.core.logging_config import configure_logging
from src.school_attendance.school_attendance.database.bootstrap import init_database

SCHEMA_PATH = REPO_ROOT / "database" / "schema.sql"


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    init_database(dict(settings.DB_CONFIG), schema_path=SCHEMA_PATH)


if __name__ == "__main__":
    main()
