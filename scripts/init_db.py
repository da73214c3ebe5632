"""Create payroll_db (if needed) and apply database/schema.sql.

Usage:
    python scripts/init_db.py [--schema PATH] [--with-seed]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.payroll_system.payroll_system.database.bootstrap import apply_schema, apply_seed_sql, list_tables
from src.payroll_system.payroll_system.database.connection import DBConfig

logger = logging.getLogger("init_db")


def main() -> int:
    parser = argparse.ArgumentParser(description="Create the payroll tables.")
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    parser.add_argument("--with-seed", action="store_true", help="Also load database/seed.sql.")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"), format="%(levelname)s %(message)s")

    db_config = dict(settings.DB_CONFIG)
    target = DBConfig.from_dict(db_config).describe()

    apply_schema(db_config, schema_path=args.schema)
    if args.with_seed:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")

    tables = sorted(list_tables(db_config))
    missing = {"employees", "attendance", "payroll_periods", "payroll_entries"} - set(tables)
    if missing:
        logger.error("Schema applied to %s but tables are missing: %s", target, ", ".join(sorted(missing)))
        return 1
    logger.info("Schema ready on %s: %s", target, ", ".join(tables))
    return 0


if __name__ == "__main__":
    sys.exit(main())
