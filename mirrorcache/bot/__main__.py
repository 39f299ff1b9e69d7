"""
mirrorcache.bot.__main__ — Entry point for ``python -m mirrorcache.bot``
========================================================================

Wiring:
1. Load .env (secrets).
2. Load config.yaml (soft settings).
3. Create the SQLAlchemy engine and ensure tables exist.
4. Build the backend and the event synchronizer.
5. Create the MirrorClient and run it (blocking).
"""

from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from mirrorcache.bot.core import MirrorClient
from mirrorcache.config import load_config
from mirrorcache.database.backend import SqlBackend
from mirrorcache.database.engine import create_db_engine, init_db
from mirrorcache.services.synchronizer import EventSynchronizer

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("mirrorcache")


def main() -> None:
    """Bootstrap and run the cache mirror."""

    # 1. Environment variables (secrets).
    load_dotenv()

    token = os.getenv("DISCORD_TOKEN")
    if not token:
        logger.critical(
            "DISCORD_TOKEN is not set.  "
            "Copy .env.example → .env and paste your bot token."
        )
        sys.exit(1)

    # 2. Soft configuration.
    cfg = load_config()
    logging.getLogger().setLevel(cfg.log_level_value)
    logger.info("Config loaded — log level %s", cfg.log_level)

    # 3. Database.
    engine = create_db_engine()
    if cfg.create_schema:
        init_db(engine)

    # 4. Cache writer.
    synchronizer = EventSynchronizer(SqlBackend(engine))

    # 5. Client.
    client = MirrorClient(cfg, synchronizer)
    logger.info("Starting gateway client…")
    try:
        client.run(token, log_handler=None)
    except KeyboardInterrupt:
        logger.info("Shutting down gracefully…")


if __name__ == "__main__":
    main()
