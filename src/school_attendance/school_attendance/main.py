from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv

from config import get_settings_module

from .container import Container, build_container
from .core.logging_config import configure_logging
from .database.bootstrap import init_database
from .events.audit import LoggingAuditHandler

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_container(*, start_events: bool = True) -> Container:
    """Load settings for ``APP_ENV`` and wire the services against MySQL."""
    load_dotenv(override=False)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    db_config = getattr(settings, "DB_CONFIG")
    logger.info(
        "settings loaded",
        extra={
            "settings": settings_module,
            "db": f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        },
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        init_database(db_config, schema_path=SCHEMA_PATH)

    container = build_container(
        db_config=db_config,
        lock_timeout=float(getattr(settings, "ROOM_LOCK_TIMEOUT_SECONDS")),
        token_lead_minutes=int(getattr(settings, "TOKEN_LEAD_MINUTES")),
        present_minutes=int(getattr(settings, "PRESENT_WINDOW_MINUTES")),
        late_minutes=int(getattr(settings, "LATE_WINDOW_MINUTES")),
        event_queue_size=int(getattr(settings, "EVENT_QUEUE_SIZE")),
    )
    if start_events:
        container.events.start(LoggingAuditHandler())
    return container
