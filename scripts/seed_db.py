from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from crew_attendance.config import get_settings_module
from crew_attendance.database.bootstrap import SEED_PATH, apply_seed_sql
from crew_attendance.database.connection import DBConfig

logger = logging.getLogger("seed_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s - %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_seed_sql(db_config, seed_path=SEED_PATH)
    logger.info("Seeded database -> %s", DBConfig.from_dict(db_config).describe())


if __name__ == "__main__":
    main()
